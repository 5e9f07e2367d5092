import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.environ.get("DBM_DATA_DIR", BASE_DIR / "data"))
CACHE_ROOT = DATA_DIR / "cache"
SHARED_CONTAINER_DIR = DATA_DIR / "shared"
DB_PATH = DATA_DIR / "dbmreader.db"
LOG_PATH = DATA_DIR / "logs" / "dbmreader.log"

COMIC_BASE_URL = "https://www.dragonball-multiverse.com"
COMIC_LANGUAGE = os.environ.get("DBM_LANGUAGE", "en")

WIDGET_KIND = "DBMultiverseWidgets"
WIDGET_DEBOUNCE_SECONDS = 2.0
WIDGET_MIN_PROGRESS_DELTA = 5

# primary page -> page drawn on the same image
DOUBLE_PAGE_SPREADS = {8: 9, 20: 21}

COVER_JPEG_QUALITY = 70
COVER_MAX_SIZE = (600, 900)
