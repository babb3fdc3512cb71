# runtime settings, overridable through the environment
import os

API_BASE_URL = os.getenv("MART_API_BASE_URL", "http://localhost:8080")
DB_PATH = os.getenv("MART_DB_PATH", "data/client.sqlite")
HTTP_TIMEOUT = float(os.getenv("MART_HTTP_TIMEOUT", "10"))

# storage key of the persisted session record
SESSION_KEY = "my-online-mart.auth"
