import os


class Config:
    # Secret key for sessions / JWT
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me-in-prod")

    # Database connection
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///rentcore.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)

    # Flask Configuration
    FLASK_ENV = os.environ.get("FLASK_ENV", "production")
    FLASK_DEBUG = os.environ.get("FLASK_DEBUG", "False").lower() == "true"
    JSON_SORT_KEYS = False
    API_PREFIX = "/api"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Billing periods roll over at local midnight
    TIMEZONE = os.environ.get("TIMEZONE", "Asia/Kolkata")

    # Comma-separated extra origins on top of the local dev servers
    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "")

    # Payment notifications: "telegram", "mail" or "none"
    NOTIFY_CHANNEL = os.environ.get("NOTIFY_CHANNEL", "telegram")
    TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
    TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")
    TELEGRAM_TIMEOUT = int(os.environ.get("TELEGRAM_TIMEOUT", 10))

    MAIL_SERVER = os.environ.get("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", 587))
    MAIL_USE_TLS = os.environ.get("MAIL_USE_TLS", "true").lower() in ["true", "on", "1"]
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER")
    NOTIFY_EMAIL = os.environ.get("NOTIFY_EMAIL")


class DevelopmentConfig(Config):
    FLASK_ENV = "development"
    FLASK_DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "testing-secret"
    JWT_SECRET_KEY = "testing-jwt-secret-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    NOTIFY_CHANNEL = "none"
    MAIL_SUPPRESS_SEND = True


class ProductionConfig(Config):
    FLASK_ENV = "production"
    FLASK_DEBUG = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": Config,
}
