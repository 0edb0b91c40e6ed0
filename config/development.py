from .config import Config, env_bool

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

UPLOAD_FOLDER = Config.UPLOAD_FOLDER
MAX_CONTENT_LENGTH = Config.MAX_CONTENT_LENGTH
LOG_LEVEL = Config.LOG_LEVEL
HOLIDAYS = Config.HOLIDAYS

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "1")
# Optional: also seed reference data and demo users on startup
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")
