import os
from dataclasses import dataclass
from dotenv import load_dotenv

from giftmatch.services.matching import DEFAULT_MAX_TRIALS

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    log_path: str
    match_max_trials: int


def _parse_max_trials(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"MATCH_MAX_TRIALS must be an integer, got {raw!r}.") from None
    if value < 1:
        raise ValueError("MATCH_MAX_TRIALS must be at least 1.")
    return value


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/giftmatch.log")
    match_max_trials = _parse_max_trials(os.getenv("MATCH_MAX_TRIALS", str(DEFAULT_MAX_TRIALS)))

    if not database_url:
        raise ValueError("DATABASE_URL is required. Set it in the environment or .env file.")

    return Settings(
        database_url=database_url,
        log_level=log_level,
        log_path=log_path,
        match_max_trials=match_max_trials,
    )
