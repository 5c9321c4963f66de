# src/ddply/logging_config.py
import logging
import logging.config
import yaml
from pathlib import Path
import coloredlogs # needed so dictConfig can resolve coloredlogs.ColoredFormatter
import sys

config_logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent / 'logging_config.yaml'
FALLBACK_FORMAT = '%(levelname)s:%(name)s:%(message)s'


def _fall_back(reason: str):
    """Plain INFO logging when the YAML setup can't be used. Never raises."""
    print(f"Warning: {reason}. Using basicConfig.", file=sys.stderr)
    logging.basicConfig(level=logging.INFO, format=FALLBACK_FORMAT)


def _load_config(config_path: Path):
    if not config_path.is_file():
        return None
    with open(config_path, 'rt', encoding='utf-8') as f:
        return yaml.safe_load(f.read())


def setup_logging(debug: bool = False, config_path: Path = CONFIG_PATH):
    """
    Applies the packaged dictConfig YAML with a colored console handler.
    Any problem with the file degrades to basicConfig; logging setup never
    stops a deploy.
    """
    try:
        coloredlogs.install()
    except Exception as install_e:
        print(f"Warning: coloredlogs.install() failed: {install_e}", file=sys.stderr)

    try:
        config = _load_config(config_path)
    except (OSError, yaml.YAMLError) as e:
        _fall_back(f"Error parsing logging configuration file {config_path}: {e}")
        config = None
    else:
        if not config_path.is_file():
            _fall_back(f"Logging configuration file not found at {config_path}")
        elif not config:
            _fall_back(f"Logging configuration file {config_path} is empty")

    if config:
        try:
            logging.config.dictConfig(config)
            config_logger.debug(f"Logging configured from {config_path}")
        except (ValueError, TypeError, AttributeError, ImportError) as e:
            # dictConfig reports bad handler/formatter definitions with these
            _fall_back(f"Error loading logging configuration from {config_path}: {e}")

    if debug:
        logging.getLogger("ddply").setLevel(logging.DEBUG)
        # handlers installed by coloredlogs/basicConfig filter on their own level
        for handler in logging.getLogger("ddply").handlers + logging.getLogger().handlers:
            handler.setLevel(logging.DEBUG)
