import logging
import os
from collections.abc import Mapping

from src.adapters.memory_store import InMemorySeoStore
from src.adapters.sqlite.store import SQLiteSeoStore
from src.core.errors import ConfigurationError
from src.core.ports.store import SeoStorePort
from src.rules.models import ObservabilityRules, Rules

logger = logging.getLogger(__name__)

MEMORY_SCHEME = "memory://"
SQLITE_SCHEME = "sqlite:///"


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigurationError: a required environment variable is missing.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in rules.env.required if name not in env]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    logger.info("Configuration validated (rules version %s)", rules.project.rules_version)


def resolve_store_url(rules: Rules, environ: Mapping[str, str] | None = None) -> str:
    """Store URL from the environment variable named in rules, else the rules default."""
    env = os.environ if environ is None else environ
    url = env.get(rules.store.url_env) or rules.store.default_url
    if not url:
        raise ConfigurationError(f"No store URL configured (set {rules.store.url_env})")
    return url


def create_store_from_url(url: str, timeout_seconds: float = 5.0) -> SeoStorePort:
    """
    Build a store adapter from its URL.

    Supported: memory:// and sqlite:///path/to/file.db
    """
    if url == MEMORY_SCHEME or url.startswith(MEMORY_SCHEME):
        return InMemorySeoStore()

    if url.startswith(SQLITE_SCHEME):
        db_path = url[len(SQLITE_SCHEME) :]
        if not db_path:
            raise ConfigurationError("SQLite store URL is missing a file path")
        store = SQLiteSeoStore(db_path, timeout_seconds=timeout_seconds)
        store.init_schema()
        return store

    raise ConfigurationError(f"Unsupported store URL: {url}")


def configure_logging(rules: ObservabilityRules) -> None:
    """Configure root logging from rules."""
    level = logging.getLevelName(rules.log_level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {rules.log_level}")
    logging.basicConfig(level=level, format=rules.log_format)
