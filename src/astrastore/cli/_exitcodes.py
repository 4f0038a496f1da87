"""Process exit codes for the astra CLI."""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
BACKEND_ERROR = 3
