from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

# Tests drive sweeps by hand with a fixed `now`
SCHEDULER_ENABLED = False
PUBLIC_BASE_URL = "http://testserver"
