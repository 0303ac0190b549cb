from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.logging_utils import configure_logging
from .common.web import install_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_SSE_KEEPALIVE_SECONDS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, ensure_demo_profiles, list_tables
from .exports.controller import register as register_exports
from .joinlinks.controller import register as register_joinlinks
from .profiles.controller import register as register_profiles
from .sessions.controller import register as register_sessions
from .settings import get_settings_module

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SSE_KEEPALIVE_SECONDS"] = float(getattr(settings, "SSE_KEEPALIVE_SECONDS", DEFAULT_SSE_KEEPALIVE_SECONDS))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    backend = getattr(settings, "STORE_BACKEND", "mysql")
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("settings=%s backend=%s", settings_module, backend)

    if backend == "mysql" and getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    if container is None:
        container = build_container(
            db_config=db_config,
            backend=backend,
            hoc_secret=getattr(settings, "HOC_REGISTRATION_SECRET", ""),
            public_base_url=getattr(settings, "PUBLIC_BASE_URL", ""),
        )

    if getattr(settings, "AUTO_SEED_DB", False):
        ensure_demo_profiles(container.profiles_repo)

    app.extensions["attendance_hub"] = container

    install_error_handlers(app)
    register_profiles(app, container)
    register_dashboard(app, container)
    register_sessions(app, container)
    register_exports(app, container)
    register_attendance(app, container)
    register_joinlinks(app, container)

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, threaded=True)


if __name__ == "__main__":
    main()
