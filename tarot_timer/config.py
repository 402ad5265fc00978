import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file at the repo root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"


def deck_dir() -> Path:
    return Path(os.getenv("TAROT_DECK_DIR") or PACKAGE_DATA_DIR)


def spreads_path() -> Path:
    return Path(os.getenv("TAROT_SPREADS_PATH") or PACKAGE_DATA_DIR / "spreads.json")


def default_deck_id() -> str:
    return os.getenv("TAROT_DEFAULT_DECK", "classic")


def default_spread_id() -> str:
    return os.getenv("TAROT_DEFAULT_SPREAD", "three_card")


def configure_logging() -> None:
    level = os.getenv("TAROT_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
