from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Any, Dict, Optional

from datalyr.constants import LIBRARY_NAME, LIBRARY_SOURCE


LOG = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_version() -> Optional[str]:
    """
    Get the version of the installed datalyr distribution.

    Returns:
      Optional[str]: The version if found, otherwise the bundled VERSION.
      Looked up once per process.
    """
    try:
        return version("datalyr")
    except PackageNotFoundError:
        LOG.debug("datalyr distribution metadata not found, using bundled VERSION.")

    from datalyr import VERSION

    return VERSION or None


def get_user_agent() -> str:
    """
    Get the user agent string for HTTP requests.

    Returns:
      str: The user agent string in the format: datalyr-python/{version} ({os} {arch}; Python/{python_version})
    """
    client_version = get_version() or "unknown"
    os_name = platform.system()

    machine = platform.machine()
    # Normalize architecture names
    if machine in ("x86_64", "AMD64"):
        arch = "x86_64"
    elif machine in ("arm64", "aarch64"):
        arch = "arm_64"
    elif machine == "i386":
        arch = "x86"
    else:
        arch = machine or "unknown"

    python_version = platform.python_version()

    return f"{LIBRARY_NAME}/{client_version} ({os_name} {arch}; Python/{python_version})"


def get_meta_http_headers() -> Dict[str, str]:
    """
    Get the metadata headers sent with every request.

    Returns:
      Dict[str, str]: The metadata headers.
    """
    return {
        "Datalyr-Client-Version": get_version() or "",
        "User-Agent": get_user_agent(),
    }


def get_library_context() -> Dict[str, Any]:
    """
    Build the context mapping attached to every event record.
    """
    return {
        "library": LIBRARY_NAME,
        "version": get_version() or "unknown",
        "source": LIBRARY_SOURCE,
    }
