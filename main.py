"""
AgriPortal Client Entry Point.

Bootstraps the entire dependency graph via constructor injection,
restores any persisted session, loads the landing dashboard, and keeps
it live until interrupted.  Every subsystem is wired here; no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import asyncio
import sys
import traceback

from agriportal.auth import SessionManager
from agriportal.config import get_config
from agriportal.database import BackendManager
from agriportal.logger import StructuredLogger, get_logger
from agriportal.routing import default_routes
from agriportal.services import create_services


async def main() -> None:
    """Application entry point: wire dependencies and run the dashboard."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting AgriPortal...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Backend connection (offline when credentials are missing)
    # ------------------------------------------------------------------
    db = await BackendManager.connect(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )

    # ------------------------------------------------------------------
    # 3. Session Manager + Service Container (single composition root)
    # ------------------------------------------------------------------
    session = SessionManager()
    services = create_services(db=db, config=config, session=session)
    routes = default_routes(get_logger("routes"))

    try:
        # --------------------------------------------------------------
        # 4. Identity: restore the persisted session, follow auth events
        # --------------------------------------------------------------
        auth = services["auth_service"]
        identity = await auth.initialize()
        if db.is_online:
            auth.attach_listener()

        landing = "/admin/dashboard" if session.is_admin else "/user/dashboard"
        decision = routes.resolve(landing, session)
        logger.info(
            "Session ready: %s",
            identity.email if identity else "anonymous",
            extra={"landing": decision.redirect_to or landing},
        )

        # --------------------------------------------------------------
        # 5. Dashboard, kept live until interrupted
        # --------------------------------------------------------------
        dashboard = services["dashboard"]
        await dashboard.refresh()
        logger.info(
            "Dashboard loaded: %d slides, %d featured activities",
            len(dashboard.slides),
            len(dashboard.activities),
        )
        if db.is_online:
            async with dashboard.watch():
                await asyncio.Event().wait()
    finally:
        await db.close()
        logger.info("AgriPortal shut down.")


def _report_fatal_error(exc: BaseException) -> None:
    """Write the traceback to stderr so the failure is never silent."""
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _report_fatal_error(exc)
        sys.exit(1)
