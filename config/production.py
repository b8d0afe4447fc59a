import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shift_tracker"),
}

SMTP_CONFIG = {
    "host": os.getenv("EMAIL_HOST", "smtp.gmail.com"),
    "port": int(os.getenv("EMAIL_PORT", "587")),
    "user": os.getenv("EMAIL_USER", ""),
    "password": os.getenv("EMAIL_APP_PASSWORD", ""),
    "sender": os.getenv("EMAIL_FROM", os.getenv("EMAIL_USER", "")),
    "use_tls": bool(int(os.getenv("EMAIL_USE_TLS", "1"))),
}
NOTIFY_MAX_ATTEMPTS = int(os.getenv("NOTIFY_MAX_ATTEMPTS", "3"))
NOTIFY_RETRY_DELAY = float(os.getenv("NOTIFY_RETRY_DELAY", "5"))

# Only used when AUTO_INIT_DB is on; no default password in production.
ADMIN_ACCOUNT = {
    "name": os.getenv("ADMIN_NAME", "Admin"),
    "email": os.getenv("ADMIN_EMAIL", ""),
    "password": os.getenv("ADMIN_PASSWORD", ""),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
