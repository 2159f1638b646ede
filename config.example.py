# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Dashboard preferences (alert timing, upcoming limits...) are not configured here; they are
persisted in the state file and changed through station.preferences.PreferenceStore.
"""

ENV_VARS = {
    # App / logging
    "STATION_APP_NAME": "App display name (default: station).",
    "STATION_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "STATION_DATA_DIR": "Local data directory (default: .local/station).",
    "STATION_STATE_PATH": "Tasks/preferences JSON state file (default: <data_dir>/state.json).",
    # Calendar
    "STATION_ICS_PATH": "Optional .ics file to read calendar events from (read-only).",
    "STATION_CALENDAR_WINDOW_DAYS": "How many days ahead to fetch calendar events (default: 30).",
    # Ticker
    "STATION_TICK_SECONDS": "Seconds between dashboard recomputations (default: 60).",
}
