import logging
import logging.config
import os
from typing import Optional

import yaml
from pythonjsonlogger import jsonlogger

from .config_loader import CONFIG

# Third-party loggers that are chatty below WARNING.
QUIET_LOGGERS = ("PIL", "httpx", "urllib3", "google.auth")

JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _configured_level() -> int:
    level = logging.getLevelName(CONFIG.logging.level.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    default_path: str = "logging.yaml",
    default_level: Optional[int] = None,
    env_key: str = "LOG_CFG",
) -> None:
    """
    Configures logging for the CLI and the dashboard API.

    A dictConfig YAML file (path taken from ``$LOG_CFG`` when set) wins.
    Without one, records go to stderr as JSON at the level named in
    ``config.yaml``.
    """
    level = default_level if default_level is not None else _configured_level()
    path = os.getenv(env_key, default_path)
    if os.path.exists(path):
        with open(path, "rt") as f:
            logging.config.dictConfig(yaml.safe_load(f))
        return

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    logging.getLogger(__name__).info(
        "No logging config at %s; logging JSON at %s.",
        path,
        logging.getLevelName(level),
    )
