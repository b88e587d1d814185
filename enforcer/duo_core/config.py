"""
Paths, logging setup, config load/save, JWT token persistence.
"""

import os
import json
import sys
import logging
from pathlib import Path

from dotenv import load_dotenv

from .constants import (
    DAILY_XP_REQUIREMENT, POLL_INTERVAL_SEC, API_TIMEOUT_SEC,
    COMMAND_TIMEOUT_SEC, DEFAULT_HOST, DEFAULT_PORT,
)
from .errors import ConfigError, PersistenceError


# ─── Paths ───────────────────────────────────────────────────────
# Everything lives in the user's home unless DUO_ENFORCER_HOME says otherwise.
BASE_DIR = Path(os.environ.get("DUO_ENFORCER_HOME") or Path.home())

CONFIG_FILE = BASE_DIR / ".duo_enforcer.json"
LOG_FILE = BASE_DIR / ".duo_enforcer.log"
JWT_FILE = BASE_DIR / ".duo_jwt_token"
DONE_FILE = BASE_DIR / ".duo_done"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

log = logging.getLogger("duo")


# ─── Logging ─────────────────────────────────────────────────────

def setup_logging(level=None, log_file=LOG_FILE):
    """File + console logging. The file is truncated once it passes 1 MB."""
    level = (level or os.environ.get("LOG_LEVEL") or "DEBUG").upper()
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT)

    handlers = []
    try:
        if log_file.exists() and log_file.stat().st_size > 1_000_000:
            log_file.write_text("")
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError as e:
        print(f"Cannot open log file {log_file}: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    for name in ("duo", "werkzeug"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = list(handlers)
        logger.propagate = False
    return log


# ─── Config Management ──────────────────────────────────────────

_ENV_OVERRIDES = {
    "host": ("DUO_HOST", str),
    "port": ("DUO_PORT", int),
    "dailyXpRequirement": ("DUO_DAILY_XP", int),
    "pollIntervalSec": ("DUO_POLL_INTERVAL", float),
    "apiTimeoutSec": ("DUO_API_TIMEOUT", float),
    "commandTimeoutSec": ("DUO_COMMAND_TIMEOUT", float),
    "doneFile": ("DUO_DONE_FILE", str),
    "jwtFile": ("DUO_JWT_FILE", str),
}


def default_config():
    return {
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "dailyXpRequirement": DAILY_XP_REQUIREMENT,
        "pollIntervalSec": POLL_INTERVAL_SEC,
        "apiTimeoutSec": API_TIMEOUT_SEC,
        "commandTimeoutSec": COMMAND_TIMEOUT_SEC,
        "doneFile": str(DONE_FILE),
        "jwtFile": str(JWT_FILE),
    }


def _read_config_file(path):
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring config %s: top level is not an object", path)
        return {}
    return data


def load_config(path=CONFIG_FILE, env=None):
    """
    Defaults < JSON config file < environment (.env loaded first).
    Returns a plain dict.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    config = default_config()
    for key, value in _read_config_file(Path(path)).items():
        if key in config:
            config[key] = value
        else:
            log.warning("Unknown config key %r ignored", key)

    for key, (var, _) in _ENV_OVERRIDES.items():
        raw = env.get(var)
        if raw:
            config[key] = raw

    for key, (_, cast) in _ENV_OVERRIDES.items():
        try:
            config[key] = cast(config[key])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {key}: {config[key]!r}") from e

    if config["pollIntervalSec"] <= 0:
        raise ConfigError("pollIntervalSec must be positive")
    if config["dailyXpRequirement"] < 0:
        raise ConfigError("dailyXpRequirement must not be negative")
    return config


# ─── JWT persistence ────────────────────────────────────────────

def load_token(config, env=None):
    """Persisted token first, then JWT_TOKEN / DUO_JWT. None if neither."""
    env = os.environ if env is None else env
    token_path = Path(config["jwtFile"])
    if token_path.exists():
        try:
            token = token_path.read_text(encoding="utf-8").strip()
            if token:
                log.info("Read %d token bytes from %s", len(token), token_path)
                return token
        except OSError as e:
            log.warning("Failed to read jwt token at %s: %s", token_path, e)

    for var in ("JWT_TOKEN", "DUO_JWT"):
        token = (env.get(var) or "").strip()
        if token:
            log.info("Read %d token bytes from %s var", len(token), var)
            return token
    return None


def save_token(config, token):
    token_path = Path(config["jwtFile"])
    try:
        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(token, encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to save JWT to {token_path}: {e}") from e
    log.info("Saved new JWT to %s", token_path)
