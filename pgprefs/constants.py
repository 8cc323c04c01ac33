"""Shared constants for pgprefs dot-directories and launchd locations."""

PGPREFS_HOME_EXT = ".pgprefs"  # user-level state/config directory suffix

# Reverse-DNS prefix for every descriptor this tool writes
DEFAULT_DOMAIN = "org.postgresql.preferences"

# Name given to a server created with Add Server
DEFAULT_SERVER_NAME = "New Server"

# launchd descriptor locations
SYSTEM_DAEMONS_DIR = "/Library/LaunchDaemons"
SYSTEM_AGENTS_DIR = "/Library/LaunchAgents"
USER_AGENTS_DIR = "~/Library/LaunchAgents"

# Server log locations
SYSTEM_LOG_DIR = "/Library/Logs/PostgreSQL"
USER_LOG_DIR = "~/Library/Logs/PostgreSQL"

# Server binary launched by the descriptor
POSTGRES_EXECUTABLE = "postgres"
