import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./audit_retention.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    RETENTION_DAYS = int(data.get("RETENTION_DAYS", 90))
    EXPORT_ROW_CAP = int(data.get("EXPORT_ROW_CAP", 10000))
    DEFAULT_PAGE_SIZE = int(data.get("DEFAULT_PAGE_SIZE", 50))
    MAX_PAGE_SIZE = int(data.get("MAX_PAGE_SIZE", 100))
    PURGE_SCHEDULER_ENABLED = bool(data.get("PURGE_SCHEDULER_ENABLED", True))
    PURGE_RUN_HOUR = int(data.get("PURGE_RUN_HOUR", 2))
    STORE_TIMEOUT_SECONDS = float(data.get("STORE_TIMEOUT_SECONDS", 10))
    STORAGE_PATH = data.get("STORAGE_PATH", "./uploads")
    SYSTEM_USER_EMAIL = data.get("SYSTEM_USER_EMAIL", "system@contracts.internal")
