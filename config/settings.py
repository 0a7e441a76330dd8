import os
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Scraper settings loaded from environment variables with defaults.

    The defaults reproduce the fixed constants of the shop scraper, so a run
    with no environment at all targets the pcgameskey.com shop and writes
    into ./output.
    """

    # Project metadata
    PROJECT_NAME = "Shop Scraper"
    PROJECT_VERSION = "0.1.0"

    # Target shop
    BASE_URL = os.getenv("BASE_URL", "https://pcgameskey.com/shop")
    CATEGORY = os.getenv("CATEGORY", "SOFTWARE")

    # Request behaviour
    MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
    ITEM_DELAY = float(os.getenv("ITEM_DELAY", "1.0"))
    PAGE_DELAY = float(os.getenv("PAGE_DELAY", "2.0"))

    # Output files
    OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "output"))
    LOG_DIR = Path(os.getenv("LOG_DIR", str(OUTPUT_DIR / "logs")))
    CSV_FILENAME = os.getenv("CSV_FILENAME", "products.csv")
    SUMMARY_FILENAME = os.getenv("SUMMARY_FILENAME", "summary.json")
    ERROR_LOG_FILENAME = os.getenv("ERROR_LOG_FILENAME", "error.log")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @property
    def CSV_PATH(self) -> Path:
        return self.OUTPUT_DIR / self.CSV_FILENAME

    @property
    def SUMMARY_PATH(self) -> Path:
        return self.OUTPUT_DIR / self.SUMMARY_FILENAME

    @property
    def ERROR_LOG_PATH(self) -> Path:
        return self.LOG_DIR / self.ERROR_LOG_FILENAME

    @property
    def DATABASE_URL(self) -> str:
        """SQLAlchemy connection string, a SQLite file next to the CSV unless overridden."""
        return os.getenv("DATABASE_URL", f"sqlite:///{self.OUTPUT_DIR / 'products.db'}")

    def ensure_dirs(self):
        """Create the output and log directories if they are missing."""
        for directory in (self.OUTPUT_DIR, self.LOG_DIR):
            directory.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


# For direct access in other modules
settings = get_settings()
