"""Service settings from environment."""

import os


def _int(val: str | None, default: int) -> int:
    if val is None or val.strip() == "":
        return default
    try:
        return int(val.strip())
    except ValueError:
        return default


def _float(val: str | None, default: float) -> float:
    if val is None or val.strip() == "":
        return default
    try:
        return float(val.strip())
    except ValueError:
        return default


def _bool(val: str | None, default: bool) -> bool:
    if val is None or val.strip() == "":
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Crawl, indexing and search settings from env vars."""

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./searchengine.db")
    SITES_CONFIG_PATH: str = os.getenv("SITES_CONFIG_PATH", "")
    CRAWL_USER_AGENT: str = os.getenv(
        "CRAWL_USER_AGENT", "Mozilla/5.0 (compatible; LemmaSearchBot/1.0; +http://localhost/bot)"
    )
    CRAWL_REFERRER: str = os.getenv("CRAWL_REFERRER", "https://www.google.com")
    CRAWL_TIMEOUT: float = _float(os.getenv("CRAWL_TIMEOUT"), 10.0)
    CRAWL_DELAY: float = _float(os.getenv("CRAWL_DELAY"), 0.5)
    CRAWL_WORKERS: int = _int(os.getenv("CRAWL_WORKERS"), os.cpu_count() or 4)
    FREQUENCY_THRESHOLD: int = _int(os.getenv("FREQUENCY_THRESHOLD"), 200)
    PROXIMITY_FILTER: bool = _bool(os.getenv("PROXIMITY_FILTER"), True)
    PROXIMITY_WINDOW: int = _int(os.getenv("PROXIMITY_WINDOW"), 200)
    LEMMA_BATCH_SIZE: int = _int(os.getenv("LEMMA_BATCH_SIZE"), 1000)
    PAGE_BATCH_SIZE: int = _int(os.getenv("PAGE_BATCH_SIZE"), 100)


settings = Settings()
