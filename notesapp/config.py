import os
from datetime import timedelta
from sqlalchemy.engine import URL
from sqlalchemy.pool import StaticPool

# Variables indispensables hors tests (le démarrage échoue sinon)
DB_ENV_VARS = ("PG_USER", "PG_HOST", "PG_DATABASE", "PG_PASSWORD", "PG_PORT")
REQUIRED_ENV_VARS = DB_ENV_VARS + (
    "PORT",
    "JWT_SECRET",
    "REFRESH_TOKEN_SECRET",
    "GOOGLE_CLIENT_ID",
    "FRONTEND_URL",
)

DEFAULT_MAX_CONTENT_LENGTH = 10 * 1024 * 1024


class ConfigError(RuntimeError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            "Missing required environment variables: " + ", ".join(self.missing)
        )


def missing_env_vars(environ=None) -> list:
    """Liste les variables requises absentes (ou vides).

    DATABASE_URL remplace les cinq variables PG_*.
    """
    environ = os.environ if environ is None else environ
    required = REQUIRED_ENV_VARS
    if environ.get("DATABASE_URL"):
        required = tuple(v for v in required if v not in DB_ENV_VARS)
    return [name for name in required if not environ.get(name)]


def database_url(environ=None) -> str:
    environ = os.environ if environ is None else environ
    if environ.get("DATABASE_URL"):
        return environ["DATABASE_URL"]
    url = URL.create(
        "postgresql+psycopg",
        username=environ.get("PG_USER"),
        password=environ.get("PG_PASSWORD"),
        host=environ.get("PG_HOST"),
        port=int(environ.get("PG_PORT") or 5432),
        database=environ.get("PG_DATABASE"),
    )
    return url.render_as_string(hide_password=False)


def engine_options(environ=None) -> dict:
    # Pool: 20 connexions max, 5s d'attente max pour en obtenir une
    environ = os.environ if environ is None else environ
    return {
        "pool_pre_ping": True,
        "pool_size": int(environ.get("DB_POOL_MAX") or 20),
        "max_overflow": 0,
        "pool_timeout": int(environ.get("DB_POOL_TIMEOUT") or 5),
        "pool_recycle": int(environ.get("DB_POOL_RECYCLE") or 30),
    }


def settings_from_env(environ=None) -> dict:
    """Valeurs lues au démarrage (après load_dotenv), pas à l'import."""
    environ = os.environ if environ is None else environ
    return {
        "SQLALCHEMY_DATABASE_URI": database_url(environ),
        "SQLALCHEMY_ENGINE_OPTIONS": engine_options(environ),
        "JWT_SECRET_KEY": environ.get("JWT_SECRET"),
        "REFRESH_TOKEN_SECRET": environ.get("REFRESH_TOKEN_SECRET"),
        "GOOGLE_CLIENT_ID": environ.get("GOOGLE_CLIENT_ID"),
        "CORS_ORIGINS": environ.get("FRONTEND_URL", "http://localhost:5173"),
        "CORS_ALLOW_HEADERS": environ.get("CORS_ALLOW_HEADERS", BaseConfig.CORS_ALLOW_HEADERS),
        "PORT": int(environ.get("PORT") or 5000),
        "RATELIMIT_DEFAULT": environ.get("RATELIMIT_DEFAULT", BaseConfig.RATELIMIT_DEFAULT),
        "RATELIMIT_STORAGE_URI": environ.get("RATELIMIT_STORAGE_URI", BaseConfig.RATELIMIT_STORAGE_URI),
        "RATELIMIT_AUTH": environ.get("RATELIMIT_AUTH", BaseConfig.RATELIMIT_AUTH),
        "MAX_CONTENT_LENGTH": int(environ.get("MAX_CONTENT_LENGTH") or DEFAULT_MAX_CONTENT_LENGTH),
        "ENFORCE_HTTPS": environ.get("ENFORCE_HTTPS", "false").lower() == "true",
        "LOG_LEVEL": (environ.get("LOG_LEVEL") or "").upper() or None,
    }


class BaseConfig:
    # Valeurs par défaut; settings_from_env() les remplace au démarrage

    # --- Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = engine_options({})

    # --- JWT (access token en cookie, géré par flask-jwt-extended)
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_COOKIE_NAME = "token"
    JWT_REFRESH_COOKIE_NAME = "refreshToken"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_COOKIE_SAMESITE = "Strict"
    JWT_COOKIE_SECURE = False
    # SameSite=Strict protège déjà les cookies
    JWT_COOKIE_CSRF_PROTECT = False

    # --- Refresh token (secret distinct, signé à part)
    REFRESH_TOKEN_EXPIRES = timedelta(days=7)

    # --- CORS
    CORS_ALLOW_HEADERS = "Content-Type"

    # --- Rate limit
    RATELIMIT_DEFAULT = "100 per 15 minutes"
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_AUTH = "5 per 15 minutes"

    # --- Sécurité HTTP
    MAX_CONTENT_LENGTH = DEFAULT_MAX_CONTENT_LENGTH
    ENFORCE_HTTPS = False

    # --- Logs (None: DEBUG si app.debug, INFO sinon)
    LOG_LEVEL = None


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False
    JWT_COOKIE_SECURE = True


class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    # IMPORTANT: pool adapté à SQLite en mémoire
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    JWT_SECRET_KEY = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef"
    GOOGLE_CLIENT_ID = "test-client-id.apps.googleusercontent.com"
    CORS_ORIGINS = "http://localhost:5173"
    PORT = 5000
    RATELIMIT_ENABLED = False


CONFIGS = {
    "development": DevConfig,
    "production": ProdConfig,
    "test": TestConfig,
    "testing": TestConfig,
}
