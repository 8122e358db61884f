from __future__ import annotations

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

# App folders
LOGS_DIRNAME = "logs"

# Environment overrides
ENV_LOG_LEVEL = "XMLMERGE_LOG_LEVEL"
ENV_LOG_TO_CONSOLE = "XMLMERGE_LOG_TO_CONSOLE"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# ---------------------------------------------------------------------------
# Merge defaults
# ---------------------------------------------------------------------------

DEFAULT_CONTAINER = "."
DEFAULT_KEY_SPEC = "@name"
