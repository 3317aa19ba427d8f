"""
Development server: `python -m api`.

Production deployments serve `api:create_app()` from a WSGI server instead.
"""
import os

from . import create_app

TRUTHY = ("1", "true", "yes")


def run_options(config, environ=os.environ) -> dict:
    """Host, port and debug flag for app.run(), env vars winning over config."""
    debug_default = str(config.get("DEBUG", False))
    return {
        "host": environ.get("FLASK_RUN_HOST", "127.0.0.1"),
        "port": int(environ.get("FLASK_RUN_PORT", "8000")),
        "debug": environ.get("FLASK_DEBUG", debug_default).lower() in TRUTHY,
    }


def main():
    app = create_app()
    app.run(**run_options(app.config))


if __name__ == "__main__":
    main()
