import logging
import os
from pathlib import Path
from dotenv import load_dotenv

LOGGER_NAME = "opening_drill"


def get_project_root() -> Path:
    """Returns the project root directory (where run_drill.py lives)."""
    # Navigate up from opening_drill/utils.py to project root
    return Path(__file__).parent.parent


def get_store_path() -> str:
    """Returns the path of the JSON study store, honouring OPENING_DRILL_STORE."""
    load_dotenv()
    configured = os.getenv('OPENING_DRILL_STORE')
    if configured:
        return configured
    return str(get_project_root() / "data" / "studies.json")


def get_float_env(name: str, default: float) -> float:
    """Reads a float setting from the environment, falling back to default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(LOGGER_NAME).warning(f"Ignoring invalid value for {name}: {raw!r}")
        return default


def setup_logging():
    """Configures the logging format and level based on environment variables."""
    load_dotenv()
    log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(LOGGER_NAME)

