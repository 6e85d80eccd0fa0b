import unittest
from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

from datalyr import VERSION
from datalyr.meta import get_library_context, get_meta_http_headers, get_user_agent, get_version


class TestMeta(unittest.TestCase):
    """Test cases for the meta module."""

    def setUp(self):
        get_version.cache_clear()

    def tearDown(self):
        get_version.cache_clear()

    @patch("datalyr.meta.version", side_effect=PackageNotFoundError("datalyr"))
    def test_get_version_falls_back_to_bundled_file(self, _mock_version):
        self.assertEqual(get_version(), VERSION)

    @patch("datalyr.meta.version", return_value="9.9.9")
    def test_get_version_prefers_distribution_metadata(self, _mock_version):
        self.assertEqual(get_version(), "9.9.9")

    @patch("datalyr.meta.version", return_value="9.9.9")
    def test_get_version_reads_metadata_once(self, mock_version):
        for _ in range(3):
            get_version()
            get_library_context()

        mock_version.assert_called_once_with("datalyr")

    @patch("datalyr.meta.platform.system", return_value="Linux")
    @patch("datalyr.meta.platform.python_version", return_value="3.11.4")
    @patch("datalyr.meta.get_version", return_value="1.0.4")
    def test_get_user_agent(self, _mock_version, _mock_python, _mock_system):
        cases = [
            ("x86_64", "x86_64"),
            ("AMD64", "x86_64"),
            ("arm64", "arm_64"),
            ("aarch64", "arm_64"),
            ("i386", "x86"),
            ("riscv64", "riscv64"),
            ("", "unknown"),
        ]

        for machine, arch in cases:
            with patch("datalyr.meta.platform.machine", return_value=machine):
                self.assertEqual(
                    get_user_agent(),
                    f"datalyr-python/1.0.4 (Linux {arch}; Python/3.11.4)",
                )

    @patch("datalyr.meta.get_version", return_value=None)
    def test_get_user_agent_without_version(self, _mock_version):
        self.assertTrue(get_user_agent().startswith("datalyr-python/unknown ("))

    @patch("datalyr.meta.get_version", return_value="1.0.4")
    def test_get_meta_http_headers(self, _mock_version):
        headers = get_meta_http_headers()

        self.assertEqual(headers["Datalyr-Client-Version"], "1.0.4")
        self.assertTrue(headers["User-Agent"].startswith("datalyr-python/1.0.4"))

    @patch("datalyr.meta.get_version", return_value="1.0.4")
    def test_get_library_context(self, _mock_version):
        self.assertEqual(
            get_library_context(),
            {"library": "datalyr-python", "version": "1.0.4", "source": "api"},
        )


if __name__ == "__main__":
    unittest.main()
