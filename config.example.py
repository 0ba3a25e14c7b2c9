# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TWOLIST_APP_NAME": "App display name (default: twolist).",
    "TWOLIST_LOG_LEVEL": "Console logging level (default: INFO).",
    # Front-ends
    "TWOLIST_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    "TWOLIST_TICKER_ENABLED": "Run the periodic tick in a background thread (true/false, default: true).",
    # Engine timing
    "TWOLIST_TICK_INTERVAL_SECONDS": "Seconds between background ticks (min 1, default: 60).",
    "TWOLIST_SAVE_DEBOUNCE_SECONDS": "Quiet time before a burst of edits is saved (default: 0.3).",
    "TWOLIST_DAILY_REMINDER_TIMES": "Comma/space separated HH:MM list (default: 09:00, 20:00).",
    # Paths (gitignored)
    "TWOLIST_DATA_DIR": "Local data directory (default: .local/twolist).",
    "TWOLIST_STATE_PATH": "Saved document path (default: <data_dir>/state.json).",
}
