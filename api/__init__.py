from datetime import datetime, timezone
import logging

import click
from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, check_secrets
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from models.session_store import SessionStore
from services.auth_flow import AuthFlowController
from services.credentials import CredentialValidator
from services.federation import GoogleOAuthClient, GoogleOAuthSettings
from utils.security import TokenIssuer, TokenSettings

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Session Auth API",
        "version": "1.0.0",
        "description": "Session-bound access/refresh tokens with single-use rotation and Google sign-in.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def build_auth_flow(config) -> AuthFlowController:
    """Wire the auth flow controller from explicit settings objects."""
    return AuthFlowController(
        sessions=SessionStore(storage),
        credentials=CredentialValidator(storage),
        issuer=TokenIssuer(TokenSettings.from_config(config)),
        federation=GoogleOAuthClient(GoogleOAuthSettings.from_config(config)),
        storage=storage,
    )


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` is applied on top of the selected config class (tests use it
    to point DATABASE_URL at a temporary database).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    check_secrets(app.config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    storage.reload(app.config["DATABASE_URL"], echo=app.config["SQLALCHEMY_ECHO"])
    app.extensions["auth_flow"] = build_auth_flow(app.config)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Delete sessions older than the refresh token lifetime."""
        cutoff = datetime.now(timezone.utc) - app.config["REFRESH_TOKEN_EXPIRES"]
        removed = app.extensions["auth_flow"].sessions.purge_older_than(cutoff)
        click.echo(f"Purged {removed} expired session(s)")

    @app.cli.command("revoke-sessions")
    @click.argument("email")
    def revoke_sessions(email):
        """Sign a user out everywhere by deleting all of their sessions."""
        auth_flow = app.extensions["auth_flow"]
        user = auth_flow.credentials.find_by_email(email)
        if user is None:
            raise click.ClickException(f"No user with email {email}")
        removed = auth_flow.revoke_user_sessions(user.id)
        click.echo(f"Revoked {removed} session(s) for {user.email}")

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Session Auth API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
