# -*- coding: utf-8 -*-
import os

# Fetch the collector address from the environment variable, defaulting to
# the public endpoint if not set
DEFAULT_HOST = os.getenv("DATALYR_HOST", "https://api.datalyr.com")

API_KEY_PREFIX = "dk_"
API_KEY_HEADER = "X-API-Key"
CONTENT_TYPE = "application/json"

LIBRARY_NAME = "datalyr-python"
LIBRARY_SOURCE = "api"

# Flush cadence
DEFAULT_FLUSH_AT = 20
MIN_FLUSH_AT = 1
MAX_FLUSH_AT = 100

# Milliseconds
DEFAULT_FLUSH_INTERVAL = 10000

# Milliseconds
DEFAULT_TIMEOUT = 10000
MIN_TIMEOUT = 1000
MAX_TIMEOUT = 60000

DEFAULT_RETRY_LIMIT = 3

DEFAULT_MAX_QUEUE_SIZE = 1000
MIN_MAX_QUEUE_SIZE = 100
MAX_MAX_QUEUE_SIZE = 10000

# Records delivered concurrently within one sub-batch of a flush
BATCH_SIZE = 10

# Seconds: backoff(attempt) = min(2 ** attempt * BACKOFF_BASE, BACKOFF_MAX)
BACKOFF_BASE = 1.0
BACKOFF_MAX = 10.0

# Seconds granted to the final flush performed by close()
CLOSE_TIMEOUT = 5.0

# Seconds granted to the background loop to tear down after close()
SHUTDOWN_TIMEOUT = 1.0

ANONYMOUS_ID_PREFIX = "anon_"

# Exit codes
EXIT_CODE_FAILURE = 1
EXIT_CODE_DELIVERY_FAILED = 3

CLI_MAIN_INTRODUCTION = "Send analytics events to Datalyr from the command line."
CLI_API_KEY_HELP = "Datalyr API key. Can also be set with the DATALYR_API_KEY environment variable."
CLI_HOST_HELP = "Collector address. Can also be set with the DATALYR_HOST environment variable."
CLI_DEBUG_HELP = "Enable debug logging."
