"""
Backend configuration using environment variables and .env file support.

Values from a .env file in the working directory override the process
environment.
"""

import os
from dotenv import load_dotenv

load_dotenv(override=True)

# Logging (optional)
# Environment variables: LOG_LEVEL, LOG_FILE
# Default: INFO, written to backend.log and stderr
log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
log_file = os.getenv('LOG_FILE', 'backend.log')

# IPC limits (optional)
# Environment variables: IPC_MAX_CONCURRENT_REQUESTS, IPC_REQUEST_TIMEOUT
# Default: 5 requests in flight, 30 second timeout per request
max_concurrent_requests = int(os.getenv('IPC_MAX_CONCURRENT_REQUESTS', '5'))
request_timeout = float(os.getenv('IPC_REQUEST_TIMEOUT', '30.0'))

# Field analysis sample (optional)
# Environment variable: CHART_SAMPLE_SIZE
# Number of leading records inspected per field
sample_size = int(os.getenv('CHART_SAMPLE_SIZE', '100'))
if sample_size < 1:
    raise ValueError("CHART_SAMPLE_SIZE must be a positive integer")
