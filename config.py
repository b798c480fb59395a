import os


# files
DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
DATABASE_FILE = os.path.join(DATA_DIR, "verdant_state.db")

# Storage keys (logical document names shared with the UI surfaces)
SESSION_STATE = "sessionState"
FOREST_STATE = "forestState"
FOCUS_METRICS = "focusMetrics"
API_CONFIG = "apiConfig"
DISTRACTION_SITES = "distractionSites"
WEBSITE_CLASSIFICATIONS = "websiteClassifications"
CACHED_ASSETS = "cachedAssets"

# Timers (seconds)
FOCUS_TICK_INTERVAL = 60
WILDFIRE_TICK_INTERVAL = 2
IDLE_CHECK_INTERVAL = 60
TIMER_WORKERS = 4

# Session
INACTIVITY_THRESHOLD = 300  # 5 minutes
FOCUSED_TICK_THRESHOLD = 50  # smoothed score needed to grow the forest
RECOVERY_WEIGHT_CURRENT = 0.05
DECLINE_WEIGHT_CURRENT = 0.4

# Wildfire trigger
WILDFIRE_TRIGGER_THRESHOLD = 30
WILDFIRE_TRIGGER_DURATION = 60
WILDFIRE_EXTINGUISH_THRESHOLD = 70

# Tab switch counting: "per_tick" or "per_session"
TAB_SWITCH_POLICY = os.getenv("VERDANT_TAB_SWITCH_POLICY", "per_tick")

# Classification cache
CLASSIFICATION_CACHE_DURATION = 7 * 24 * 60 * 60  # 7 days
DEFAULT_NEUTRAL_SCORE = 55

# Store
STORE_MAX_RETRIES = 8
