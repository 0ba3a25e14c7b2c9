# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for anything environment-specific. This file should contain only safe overrides.
"""

# Example: run only the background ticker (no console)
# CONSOLE_ENABLED = False

# Example: disable periodic ticks; the launch tick still runs
# TICKER_ENABLED = False

# Example: different daily reminder times
# DAILY_REMINDER_TIMES = ["07:30", "21:00"]
