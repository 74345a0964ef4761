import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _database_url():
    url = os.getenv("DATABASE_URL", "sqlite:///" + os.path.join(BASE_DIR, "seget_agendamento.db"))
    # Some hosts still hand out the legacy scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Admin session cookie
    AUTH_COOKIE_NAME = "seget_admin_session"
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60
    IDLE_TIMEOUT_SECONDS = 30 * 60
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # Room catalogue: id -> display name
    ROOMS = {
        "receitorio": "Receitório",
        "sala_delta": "Sala Delta",
        "escola_fazendaria": "Escola Fazendária",
    }

    # Multi-venue room rules
    MULTI_VENUE_ROOM = os.getenv("MULTI_VENUE_ROOM", "escola_fazendaria")
    MULTI_VENUE_REQUIRED_DATES = int(os.getenv("MULTI_VENUE_REQUIRED_DATES", "3"))
    MULTI_VENUE_OPEN = os.getenv("MULTI_VENUE_OPEN", "08:00")
    MULTI_VENUE_CLOSE = os.getenv("MULTI_VENUE_CLOSE", "17:00")

    # Used when the room has no stored computer count
    DEFAULT_COMPUTER_CAPACITY = int(os.getenv("DEFAULT_COMPUTER_CAPACITY", "5"))

    MIN_BOOKING_MINUTES = 60

    BCRYPT_ROUNDS = 12

    # Administrative blocks may only name times inside this window
    BLOCK_OPEN = "08:00"
    BLOCK_CLOSE = "17:00"

    # Booking times are wall-clock times in this zone
    TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")

    # Attendance confirmation
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:8080")
    ATTENDANCE_GRACE_MINUTES = 60

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # "deferred": send after the response is closed, "inline": send immediately
    MAIL_DISPATCH = os.getenv("MAIL_DISPATCH", "deferred")
    MAIL_SEND_DELAY_SECONDS = float(os.getenv("MAIL_SEND_DELAY_SECONDS", "2"))
    MAIL_RATE_LIMIT_COOLDOWN_MINUTES = int(os.getenv("MAIL_RATE_LIMIT_COOLDOWN_MINUTES", "60"))

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    MAIL_DISPATCH = "inline"
    MAIL_SEND_DELAY_SECONDS = 0
    SMTP_HOST = "smtp.test"
    SMTP_FROM_EMAIL = "agendamento@seget.test"
    BCRYPT_ROUNDS = 4
