import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./pulsecrm.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Signature requests
    APP_BASE_URL = data.get("APP_BASE_URL", "http://localhost:3010")
    SIGNATURE_REQUEST_TTL_DAYS = int(data.get("SIGNATURE_REQUEST_TTL_DAYS", 7))
    DEFAULT_REQUESTED_BY = data.get("DEFAULT_REQUESTED_BY", "PulseCRM User")

    # Email (SendGrid); an empty key means email is not configured
    SENDGRID_API_KEY = data.get("SENDGRID_API_KEY", "")
    EMAIL_FROM = data.get("EMAIL_FROM", "noreply@pulsecrm.com")
    EMAIL_FROM_NAME = data.get("EMAIL_FROM_NAME", "PulseCRM")
    NOTIFICATION_EMAIL = data.get("NOTIFICATION_EMAIL", "")
    SUPPORT_EMAIL = data.get("SUPPORT_EMAIL", "support@pulsecrm.com")

    # Document storage
    SIGNED_DOCUMENTS_DIR = data.get(
        "SIGNED_DOCUMENTS_DIR", os.path.join(ROOT_PATH, "data", "signed")
    )
    DOCUMENT_FETCH_TIMEOUT = float(data.get("DOCUMENT_FETCH_TIMEOUT", 30))
    MAX_DOCUMENT_BYTES = int(data.get("MAX_DOCUMENT_BYTES", 25 * 1024 * 1024))
