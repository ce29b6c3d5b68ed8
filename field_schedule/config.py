import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Config:
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Load a demo league and rental into the in-memory store on startup
    SEED_SAMPLE_DATA = _flag("SEED_SAMPLE_DATA")

    # Calendar view: how many upcoming occurrences to project per slot
    DEFAULT_OCCURRENCE_COUNT = int(os.getenv("DEFAULT_OCCURRENCE_COUNT", "4"))
    MAX_OCCURRENCE_COUNT = int(os.getenv("MAX_OCCURRENCE_COUNT", "52"))
