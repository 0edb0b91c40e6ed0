import os
import tempfile

from .config import Config

SECRET_KEY = "test-secret"
DB_CONFIG = Config.db_config()

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(tempfile.gettempdir(), "hr_records_uploads"))
MAX_CONTENT_LENGTH = Config.MAX_CONTENT_LENGTH
LOG_LEVEL = "DEBUG"
HOLIDAYS = ()

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
