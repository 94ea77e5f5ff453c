from .base import Config, db_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config()

TENANT = "test"
AUTO_CHECKOUT_TIME = "22:00"
PERSISTENCE_RETRIES = 2
PERSISTENCE_RETRY_DELAY = 0.0
LOCK_TIMEOUT_SECONDS = 1.0

DEBUG = False
TESTING = True
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = False
