import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, LOG_DIR, LOG_FILE_NAME

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
LOG_PATH = BASE_DIR / LOG_DIR / LOG_FILE_NAME

# MIMIPRO_DB_PATH points the app at another database file (backups, demos)
DB_PATH = Path(os.environ.get("MIMIPRO_DB_PATH") or DATA_PATH / DB_FILE_NAME)
