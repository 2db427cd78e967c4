"""
Recents and workflow constants. No per-user values here (see welcomekit/config/default.yaml).
Settings slot, capacity, notification channel, env names.
"""
# ---------------------------------------------------------------------------
# Recents store
# ---------------------------------------------------------------------------
RECENTS_SETTINGS_KEY = "recentProjectBookmarks"
RECENTS_CAPACITY = 100

# Broadcast channel fired after every successful mutation; carries no payload
RECENTS_UPDATED = "recents_updated"

# ---------------------------------------------------------------------------
# Capability tokens
# ---------------------------------------------------------------------------
TOKEN_VERSION = 1

# ---------------------------------------------------------------------------
# Env var names
# ---------------------------------------------------------------------------
ENV_CONFIG = "WELCOMEKIT_CONFIG"
ENV_LOG_LEVEL = "WELCOMEKIT_LOG_LEVEL"
ENV_LOG_DIR = "WELCOMEKIT_LOG_DIR"
