import logging
import logging.config
from pathlib import Path
from typing import Optional

import yaml

from ..config.settings import settings

DEFAULT_LOGGING_CONFIG_PATH = Path(settings.LOGGING_CONFIG_PATH)
SERVICE_LOGGER = "poor_jokes"


def setup_logging(config_path: Path = DEFAULT_LOGGING_CONFIG_PATH, debug: Optional[bool] = None) -> None:
    """
    Configure logging for the joke service from a YAML dictConfig file.

    Falls back to basicConfig when the file is missing or unreadable. With `debug`
    (defaults to settings.DEBUG) the service loggers are lowered to DEBUG so skipped
    notification channels and Telegram updates show up.

    Args:
        config_path (Path): Path to the logging configuration YAML file.
        debug (bool, optional): Override for settings.DEBUG.
    """
    debug = settings.DEBUG if debug is None else debug
    level = logging.DEBUG if debug else logging.INFO

    if not config_path.exists():
        logging.basicConfig(level=level)
        logging.warning(f"Logging configuration file not found at {config_path}. Using basicConfig.")
        return

    try:
        with open(config_path, 'rt') as f:
            log_config = yaml.safe_load(f.read())
        logging.config.dictConfig(log_config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logging.basicConfig(level=level)
        logging.error(f"Error loading logging configuration from {config_path}: {e}. Using basicConfig.")
        return

    if debug:
        logging.getLogger(SERVICE_LOGGER).setLevel(logging.DEBUG)
        for handler in logging.getLogger(SERVICE_LOGGER).handlers:
            handler.setLevel(logging.DEBUG)
    logging.getLogger(__name__).info(f"Logging configured from {config_path} (debug={debug})")
