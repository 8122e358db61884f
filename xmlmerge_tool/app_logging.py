from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .constants import ENV_LOG_LEVEL, ENV_LOG_TO_CONSOLE, LOG_FORMAT, LOGS_DIRNAME
from .util import env_bool, env_str, find_app_root


_LOG = logging.getLogger("xmlmerge_tool")


def _find_app_root(start: Path) -> Path:
    return find_app_root(start)


def _level() -> int:
    name = env_str(ENV_LOG_LEVEL, "INFO").upper()
    return getattr(logging, name, logging.INFO)


def init_app_logging(component: str = "cli", *, to_file: bool = True) -> Optional[Path]:
    """Initialise logging for one run.

    With `to_file`, creates ./logs/<component>_<timestamp>.log under the app
    root and attaches a FileHandler to the root logger. A stderr handler is
    added when XMLMERGE_LOG_TO_CONSOLE is set (stdout is left for command
    output). The level comes from XMLMERGE_LOG_LEVEL.

    Returns the log file path, or None if no file is being written.
    """
    # Avoid double-initialisation
    if getattr(init_app_logging, "_initialised", False):
        return getattr(init_app_logging, "_log_path", None)

    level = _level()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if env_bool(ENV_LOG_TO_CONSOLE):
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(sh)

    log_path: Optional[Path] = None
    if to_file:
        try:
            logs = _find_app_root(Path(__file__).resolve().parent) / LOGS_DIRNAME
            logs.mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            log_path = logs / f"{component}_{ts}.log"
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(fh)
        except OSError as e:
            # Logging must never stop the command itself.
            _LOG.warning("could not open log file: %s", e)
            log_path = None

    try:
        from . import __version__
        _LOG.info("=== xmlmerge_tool %s (%s) ===", __version__, component)
        _LOG.info("cwd=%s", str(Path.cwd()))
        _LOG.info("python=%s", sys.version.replace("\n", " "))
    except ImportError:
        pass

    setattr(init_app_logging, "_initialised", True)
    setattr(init_app_logging, "_log_path", log_path)
    return log_path


def current_log_path() -> Optional[Path]:
    """Return the current per-run log path, if a log file is open."""
    return getattr(init_app_logging, "_log_path", None)
