import os
import click
from flask import Flask, jsonify, request
from flask_limiter import RateLimitExceeded
from dotenv import load_dotenv
from sqlalchemy import text

from .config import CONFIGS, DevConfig, ConfigError, missing_env_vars, settings_from_env
from .extensions import db, migrate, jwt, cors, limiter
from .common.errors import register_error_handlers, json_error
from .common.logging import setup_json_logging, register_request_logging


def create_app(overrides=None):
    """App factory.

    ``overrides`` (mapping) est appliqué après la config d'environnement;
    les tests s'en servent pour injecter leurs valeurs sans toucher os.environ.
    """
    # Charge .env si présent (dev)
    load_dotenv()

    app = Flask(__name__)

    # Choix config selon env
    env = os.getenv("APP_ENV") or os.getenv("FLASK_ENV", "development")
    config_cls = CONFIGS.get(env, DevConfig)
    app.config.from_object(config_cls)

    if not app.config.get("TESTING"):
        missing = missing_env_vars()
        if missing:
            raise ConfigError(missing)
        app.config.update(settings_from_env())

    if overrides:
        app.config.update(overrides)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    setup_json_logging(app)
    register_request_logging(app)

    # Services explicites (remplaçables en test via app.extensions)
    from .auth.tokens import TokenService
    from .auth.google import GoogleVerifier
    app.extensions["tokens"] = TokenService.from_config(app.config)
    app.extensions["google_verifier"] = GoogleVerifier(app.config.get("GOOGLE_CLIENT_ID"))

    # --- Helpers ---
    def _csv(value, default_if_empty):
        """Convertit une chaîne CSV en liste, sinon retourne la valeur telle quelle ou un défaut."""
        if value is None:
            return default_if_empty
        if isinstance(value, str) and "," in value:
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default_if_empty
        return value

    # --- CORS: uniquement le frontend, avec cookies ---
    cors.init_app(app, resources={
        r"/api/*": {
            "origins": _csv(app.config.get("CORS_ORIGINS"), []),
            "allow_headers": _csv(app.config.get("CORS_ALLOW_HEADERS"), ["Content-Type"]),
            "supports_credentials": True,
        }
    })

    # --- Limiter: storage & défaut configurable ---
    limiter.init_app(app)   # PAS d'arguments ici ; Limiter lit RATELIMIT_* depuis app.config

    # Importer les modèles pour que Flask-Migrate/Alembic voie les tables
    from .users import models as users_models  # noqa: F401
    from .notes import models as notes_models  # noqa: F401

    # Handlers d'erreurs JSON uniformes
    register_error_handlers(app)

    # --- Callbacks JWT (erreurs 401 catégorisées) ---
    from .auth.handlers import register_jwt_handlers
    register_jwt_handlers(jwt)

    # --- Security headers ---
    @app.after_request
    def set_security_headers(resp):
        # API JSON: CSP très restrictif (pas d'HTML attendu)
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "no-referrer"

        # HSTS uniquement si HTTPS (prod / reverse-proxy)
        if (env == "production" or app.config.get("ENFORCE_HTTPS")) and (
            request.is_secure or request.headers.get("X-Forwarded-Proto", "") == "https"
        ):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return resp

    # --- 429 Rate limit JSON ---
    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limit(e):
        return json_error("Too many requests, try again later", 429)

    # --- Blueprints ---
    from .users.routes import bp as users_bp
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")

    from .notes.routes import bp as notes_bp
    app.register_blueprint(notes_bp, url_prefix="/api/v1/notes")

    from .docs.routes import bp as docs_bp
    app.register_blueprint(docs_bp)

    # Liveness (ping DB simple)
    @app.get("/healthz")
    def healthz():
        db_status = "up"
        try:
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            app.logger.warning("healthz_db_down", exc_info=True)
            db_status = "down"
        return jsonify({
            "status": "ok",
            "env": env,
            "db": db_status
        })

    @app.cli.command("init-db")
    def init_db():
        """Crée les tables (sans migrations)."""
        db.create_all()
        click.echo("Tables created.")

    return app
