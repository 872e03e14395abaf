from dotenv import load_dotenv
import os

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reports.db")

# Comma separated, "*" allows any origin
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Open policies only cover select/insert/update; hard delete must be enabled explicitly
ALLOW_HARD_DELETE = os.getenv("ALLOW_HARD_DELETE", "false").lower() in ("1", "true", "yes")

ALERT_RECIPIENTS = [r.strip() for r in os.getenv("ALERT_RECIPIENTS", "").split(",") if r.strip()]
ALERT_SEVERITIES = ("critical", "high")

MAIL_USERNAME = os.getenv("MAIL_USERNAME", "user@example.com")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "password")
MAIL_FROM = os.getenv("MAIL_FROM", "alerts@roadwatch.app")
MAIL_PORT = int(os.getenv("MAIL_PORT", 587))
MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_MAP_CENTER = (40.7128, -74.0060)  # NYC
