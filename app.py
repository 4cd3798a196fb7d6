import os
from datetime import timedelta
from typing import Any, Optional

from flask import Flask, current_app, render_template, request

from stampcard import create_stampcard_blueprint
from stampcard.catalog import load_catalog
from stampcard.motivation import DEFAULT_MODEL, DEFAULT_TIMEOUT_SECONDS, fetcher_from_config


# ====== Feature toggle ======
def _env_flag(name: str, default: bool) -> bool:
    """Parse truthy feature-toggle values from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


USE_MOTIVATION = _env_flag("USE_MOTIVATION", True)  # ✨ Gemini messages after each stamp
MAINTENANCE_MODE = _env_flag("MAINTENANCE_MODE", False)  # ⛔️ Change to True to enable maintenance mode

# ====== Motivation (Gemini) settings ======
GEMINI_API_KEY = (os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or "").strip() or None
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", DEFAULT_MODEL)

MOTIVATION_TIMEOUT_SECONDS = DEFAULT_TIMEOUT_SECONDS
_timeout_env = os.environ.get("MOTIVATION_TIMEOUT_SECONDS")
if _timeout_env:
    try:
        MOTIVATION_TIMEOUT_SECONDS = max(1, int(_timeout_env))
    except ValueError:
        print(f"⚠️ Invalid MOTIVATION_TIMEOUT_SECONDS value: {_timeout_env!r}. Using default {MOTIVATION_TIMEOUT_SECONDS}.")

# ====== Session (progress lives in the visitor's cookie) ======
SESSION_LIFETIME_DAYS = 365
SECRET_KEY = os.environ.get("SECRET_KEY")
if SECRET_KEY is not None:
    SECRET_KEY = SECRET_KEY.strip() or None
if not SECRET_KEY:
    print("⚠️ SECRET_KEY not set; stamp progress will not survive a server restart.")


def create_app(config: Optional[dict[str, Any]] = None) -> Flask:
    """Build the stamp card app; ``config`` overrides the environment-derived defaults."""
    app = Flask(__name__)
    app.secret_key = SECRET_KEY or os.urandom(24)
    app.permanent_session_lifetime = timedelta(days=SESSION_LIFETIME_DAYS)
    app.config.setdefault("USE_MOTIVATION", USE_MOTIVATION)
    app.config.setdefault("MAINTENANCE_MODE", MAINTENANCE_MODE)
    app.config.setdefault("GEMINI_API_KEY", GEMINI_API_KEY)
    app.config.setdefault("GEMINI_MODEL", GEMINI_MODEL)
    app.config.setdefault("MOTIVATION_TIMEOUT_SECONDS", MOTIVATION_TIMEOUT_SECONDS)
    app.config.setdefault("STAMPCARD_CATALOG_PATH", None)
    app.json.ensure_ascii = False
    if config:
        app.config.update(config)

    @app.errorhandler(404)
    @app.errorhandler(500)
    def show_custom_error_page(err):
        status_code = getattr(err, "code", 500) or 500
        return render_template("error.html", status_code=status_code), status_code

    @app.before_request
    def check_maintenance_mode():
        endpoint = request.endpoint or ""
        if endpoint == "static":
            return None
        if current_app.config.get("MAINTENANCE_MODE"):
            return render_template("maintenance.html"), 503
        return None

    app.register_blueprint(
        create_stampcard_blueprint(
            load_catalog,
            lambda: fetcher_from_config(current_app.config),
        )
    )

    with app.app_context():
        try:
            catalog = load_catalog()
            app.logger.info("Stamp catalog loaded with %s stamps", catalog.total)
        except (FileNotFoundError, ValueError) as exc:
            app.logger.warning("Stamp catalog not loaded at startup: %s", exc)
        if not app.config.get("GEMINI_API_KEY"):
            app.logger.info("GEMINI_API_KEY not set; stamp messages use the fallback text.")

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=_env_flag("FLASK_DEBUG", False))
