"""
Backend Connection Layer.

Owns the single ``supabase.AsyncClient`` used by the whole portal.  The
backend-as-a-service provides authentication, PostgREST tables, object
storage, and realtime change feeds; this module only manages the
*connection*.  It contains no query logic.

Data access is performed through the Repository pattern and the realtime
relay; nothing outside ``agriportal.repositories``, ``agriportal.services
.realtime`` and ``agriportal.services.auth_service`` touches the client.

Usage (dependency injection at app startup)::

    from agriportal.database import BackendManager
    from agriportal.logger import StructuredLogger

    db = await BackendManager.connect(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
    # Inject `db` into repositories / services that need it.
    ...
    await db.close()
"""

from __future__ import annotations

from typing import Optional

from supabase import AsyncClient, acreate_client

from agriportal.logger import StructuredLogger


class BackendManager:
    """Holds the Supabase async client for the lifetime of a session.

    When the URL or key is empty the client is **not** created.  Every
    repository call then hits the ``RuntimeError`` raised by the
    :pyattr:`client` property, which the managers catch at their
    operation boundary and report as an ordinary failure.

    Parameters
    ----------
    client:
        An already-created ``AsyncClient`` (or a test double exposing the
        same surface), or ``None`` for offline mode.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(
        self,
        client: Optional[AsyncClient],
        logger: StructuredLogger,
    ) -> None:
        self._client: Optional[AsyncClient] = client
        self._logger: StructuredLogger = logger

    @classmethod
    async def connect(
        cls,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
    ) -> "BackendManager":
        """Create the async Supabase client and wrap it.

        Credential format errors are logged and produce an offline
        manager instead of propagating, mirroring how every later
        backend failure is reported.
        """
        client: Optional[AsyncClient] = None
        if supabase_url and supabase_key:
            try:
                client = await acreate_client(supabase_url, supabase_key)
                logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                logger.warning(
                    "Supabase credential format error: %s. Running in offline mode.",
                    exc,
                )
            except Exception as exc:
                logger.error(
                    "Unexpected Supabase initialization failure: %s. "
                    "Running in offline mode.",
                    exc,
                    exc_info=True,
                )
        else:
            logger.warning(
                "Supabase credentials not configured; running in offline mode."
            )
        return cls(client=client, logger=logger)

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def client(self) -> AsyncClient:
        """Return the initialised Supabase client.

        Raises
        ------
        RuntimeError
            If the client was not initialised (offline mode).
        """
        if self._client is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "The portal is running in offline mode."
            )
        return self._client

    @property
    def is_online(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release every realtime channel still open on the client.

        Subscriptions are normally released by their owners; this is the
        last sweep at shutdown.  Safe to call multiple times.
        """
        if self._client is None:
            return
        try:
            await self._client.remove_all_channels()
            self._logger.info("Realtime channels released.")
        except Exception as exc:
            self._logger.warning("Could not release realtime channels: %s", exc)
