import os
import re
import logging
from typing import Optional, Dict, Any
from dotenv import load_dotenv, find_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 300_000_000
PRIVATE_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def load_env(env_file: Optional[str] = None, env: Optional[str] = None) -> Optional[str]:
    """Load a .env file into the process environment.

    ``env_file`` wins over ``env`` (which selects ``.env.<env>``); with neither,
    a ``.env`` in the working directory is loaded when present. Variables that
    are already set are not overridden.
    """
    if env_file:
        if not os.path.isfile(env_file):
            raise ConfigError(f"env file not found: {env_file}")
        load_dotenv(env_file, override=False)
        return env_file

    if env:
        path = f".env.{env}"
        if not os.path.isfile(path):
            raise ConfigError(f"env file not found: {path}")
        load_dotenv(path, override=False)
        return path

    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)
        logger.debug("Loaded environment from %s", path)
        return path
    return None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.replace("_", ""))
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def load_config() -> Dict[str, Any]:
    return {
        "PRIVATE_KEY": os.getenv("DEPLOY_PRIVATE_KEY") or None,
        "GAS_LIMIT": _int_env("DEPLOY_GAS_LIMIT", DEFAULT_GAS_LIMIT),
        "GAS_PRICE": _int_env("DEPLOY_GAS_PRICE", 0),   # 0 = ask the node
        "CONFIRMATIONS": _int_env("DEPLOY_CONFIRMATIONS", 0),
        "LEDGER_DIR": os.getenv("GBLEND_LEDGER_DIR", "deployments"),
        "LOG_PATH": os.getenv("GBLEND_LOG_PATH", "./logs/deployments.jsonl"),
    }


def require_private_key(value: Optional[str]) -> str:
    """Validate an injected deployer key and return it without the 0x prefix."""
    if not value:
        raise ConfigError(
            "No deployer key configured. Pass --private-key or set DEPLOY_PRIVATE_KEY."
        )
    key = value.strip()
    if key.startswith("0x"):
        key = key[2:]
    if not PRIVATE_KEY_RE.match(key):
        raise ConfigError("Private key must be 32 bytes (64 hex characters) long")
    return key
