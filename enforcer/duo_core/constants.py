"""
Constants, thresholds, remote endpoints and status messages.
"""

APP_VERSION = "0.3.0"

# ─── Quota ───────────────────────────────────────────────────────
DAILY_XP_REQUIREMENT = 100     # XP needed before the block is lifted
POLL_INTERVAL_SEC = 30         # Background poll period

# ─── Network ─────────────────────────────────────────────────────
API_TIMEOUT_SEC = 2            # Per remote request (connect + read)
COMMAND_TIMEOUT_SEC = 10       # How long a web request waits for the actor
COMMAND_QUEUE_SIZE = 16        # Bounded command channel
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4550

DUOLINGO_API_BASE = "https://www.duolingo.com/2017-06-30"
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) Chrome/83.0.4103.116 DuolingoEnforcer/1.0"

# ─── UI ──────────────────────────────────────────────────────────
STATUS_REFRESH_MS = 5000       # Browser re-fetches /api/status this often

# ─── Status messages (shown in last_error) ───────────────────────
NO_CLIENT_ERROR = "no client available"
JWT_UPDATED_OK = "JWT updated OK"
