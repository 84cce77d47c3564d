from config.config import *  # noqa: F401,F403

DEBUG = True
LOG_LEVEL = "DEBUG"
