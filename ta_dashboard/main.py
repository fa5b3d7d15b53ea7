"""Entry point for the TA dashboard backend."""

import logging
import sys
from pathlib import Path

import uvicorn
import yaml

from .api import create_app
from .config import get_config, load_config
from .sheets import build_source

LOG_DIR = Path(__file__).parent.parent / "logs"


def setup_logging() -> None:
    """Configure logging for the application."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / "app.log"

    config = get_config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout),
        ],
    )


def main() -> int:
    """Load configuration, connect to Google Sheets and serve the API."""
    try:
        load_config()
        setup_logging()
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger = logging.getLogger(__name__)
    config = get_config()

    if not config.spreadsheet_id:
        logger.warning("No Google Sheet ID configured, dashboard will serve mock data")

    source = build_source(config)
    app = create_app(config, source)

    logger.info(f"Server running on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
