import os

from .base import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config()

TENANT = Config.TENANT
AUTO_CHECKOUT_TIME = Config.AUTO_CHECKOUT_TIME
PERSISTENCE_RETRIES = Config.PERSISTENCE_RETRIES
PERSISTENCE_RETRY_DELAY = Config.PERSISTENCE_RETRY_DELAY
LOCK_TIMEOUT_SECONDS = Config.LOCK_TIMEOUT_SECONDS

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
