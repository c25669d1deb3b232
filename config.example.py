# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKGRID_APP_NAME": "App display name (default: taskgrid).",
    "TASKGRID_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKGRID_LOG_DIR": "Directory for taskgrid.log (default: .local/taskgrid).",
    # Remote API
    "TASKGRID_API_BASE_URL": "Task API base URL (default: http://127.0.0.1:3000).",
    "TASKGRID_API_TIMEOUT_SECONDS": "Overall request timeout (default: 10, never below connect timeout).",
    "TASKGRID_API_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    # Layout / calendar
    "TASKGRID_LAYOUT_STRATEGY": "Lane strategy: pairwise (default, order-dependent) or sweep (minimum lanes).",
    "TASKGRID_WEEK_STARTS_ON": "First weekday of /week: 0=Monday ... 6=Sunday (default: 0).",
}
