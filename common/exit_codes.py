"""
Standardised exit codes for the Notion export script

Exit codes are organised by category to make it easy to identify the type of
failure from a scheduler or wrapper script.

Usage:
    from common.exit_codes import EXIT_SUCCESS, EXIT_API_AUTH

    def main() -> int:
        if auth_failed:
            logger.error("Authentication failed")
            return EXIT_API_AUTH

        return EXIT_SUCCESS

Exit Code Ranges:
    0: Success
    1-10: Configuration & Setup errors
    21-30: File operation errors
    31-40: Network & API errors
    50-59: Processing errors
    60-69: System errors
    99: Unknown/unexpected errors
"""

from __future__ import annotations

# SUCCESS
EXIT_SUCCESS = 0

# CONFIGURATION & SETUP (1-10)
EXIT_CONFIG_ERROR = 1      # Configuration file error or validation failure
EXIT_ARGS_ERROR = 2        # Invalid command line arguments

# FILE OPERATIONS (21-30)
EXIT_FILE_WRITE = 23       # Export file could not be written

# NETWORK & API (31-40)
EXIT_NETWORK = 31          # General network connection error
EXIT_API_AUTH = 32         # Invalid or missing integration token (401/403)
EXIT_API_NOT_FOUND = 33    # Database not found or not shared with the integration (404)
EXIT_API_RATE_LIMIT = 34   # API rate limit exceeded (429)
EXIT_API_SERVER = 35       # API server error (5xx)
EXIT_API_RESPONSE = 36     # API returned unexpected/invalid response body
EXIT_TIMEOUT = 38          # Request timeout

# PROCESSING (50-59)
EXIT_NO_DATA = 52          # Query returned no records

# SYSTEM (60-69)
EXIT_INTERRUPTED = 60      # Interrupted by user (Ctrl+C)

# UNKNOWN (99)
EXIT_UNKNOWN = 99          # Unknown/unexpected error


def exit_code_for_status(status_code: int) -> int:
    """Map an HTTP status code from the API to an exit code"""
    if status_code in (401, 403):
        return EXIT_API_AUTH
    if status_code == 404:
        return EXIT_API_NOT_FOUND
    if status_code == 429:
        return EXIT_API_RATE_LIMIT
    if 500 <= status_code < 600:
        return EXIT_API_SERVER
    return EXIT_API_RESPONSE


__all__ = [
    'EXIT_SUCCESS',
    'EXIT_CONFIG_ERROR',
    'EXIT_ARGS_ERROR',
    'EXIT_FILE_WRITE',
    'EXIT_NETWORK',
    'EXIT_API_AUTH',
    'EXIT_API_NOT_FOUND',
    'EXIT_API_RATE_LIMIT',
    'EXIT_API_SERVER',
    'EXIT_API_RESPONSE',
    'EXIT_TIMEOUT',
    'EXIT_NO_DATA',
    'EXIT_INTERRUPTED',
    'EXIT_UNKNOWN',
    'exit_code_for_status',
]
