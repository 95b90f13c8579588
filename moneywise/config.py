"""Runtime settings for the tracker.

Values come from the environment (optionally a ``.env`` file next to the
working directory) with sensible defaults for local use.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from moneywise.domain import MONTHLY
from moneywise.periods import normalize_period

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer, using %d", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    default_period: str = MONTHLY
    recent_limit: int = 5
    seed_path: str = "data/seed.json"
    currency: str = "$"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            log_level=os.getenv("MONEYWISE_LOG_LEVEL", "INFO").upper(),
            default_period=normalize_period(os.getenv("MONEYWISE_DEFAULT_PERIOD", MONTHLY)),
            recent_limit=_int_env("MONEYWISE_RECENT_LIMIT", 5),
            seed_path=os.getenv("MONEYWISE_SEED_PATH", "data/seed.json"),
            currency=os.getenv("MONEYWISE_CURRENCY", "$"),
        )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
