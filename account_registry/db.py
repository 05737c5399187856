"""MongoDB connection bootstrap and lifecycle logging."""

from __future__ import annotations

import logging
from threading import Lock

from pymongo import MongoClient, monitoring
from pymongo.errors import PyMongoError

from .config import Settings
from .errors import ConnectionBootstrapError

logger = logging.getLogger(__name__)


class ConnectionLifecycleLogger(monitoring.TopologyListener):
    """Log connected / disconnected / reconnected transitions of the deployment.

    pymongo calls listeners from its monitor threads, so state is lock-guarded.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._connected = False
        self._ever_connected = False

    def opened(self, event: monitoring.TopologyOpenedEvent) -> None:
        logger.debug("core.mongo - topology - opened - %s", event.topology_id)

    def description_changed(self, event: monitoring.TopologyDescriptionChangedEvent) -> None:
        writable = event.new_description.has_writable_server()
        with self._lock:
            if writable == self._connected:
                return
            self._connected = writable
            reconnect = writable and self._ever_connected
            self._ever_connected = self._ever_connected or writable
        if reconnect:
            logger.info("core.mongo - connection - reconnected")
        elif writable:
            logger.info("core.mongo - connection - connected")
        else:
            logger.warning("core.mongo - connection - disconnected")

    def closed(self, event: monitoring.TopologyClosedEvent) -> None:
        logger.info("core.mongo - connection - closed")


class CommandDebugLogger(monitoring.CommandListener):
    """Trace every command through the application logger."""

    def started(self, event: monitoring.CommandStartedEvent) -> None:
        logger.info(
            "core.mongo - request - %s.%s - %s",
            event.database_name,
            event.command_name,
            event.command,
        )

    def succeeded(self, event: monitoring.CommandSucceededEvent) -> None:
        logger.debug(
            "core.mongo - request - %s succeeded in %dus", event.command_name, event.duration_micros
        )

    def failed(self, event: monitoring.CommandFailedEvent) -> None:
        logger.warning(
            "core.mongo - request - %s failed in %dus - %s",
            event.command_name,
            event.duration_micros,
            event.failure,
        )


def connect(settings: Settings) -> MongoClient | None:
    """Open the client and verify the deployment is reachable before serving.

    Returns ``None`` when no URI is configured. Raises ``ConnectionBootstrapError``
    when the client options are rejected or the initial ping fails, which aborts
    application startup.
    """
    if not settings.mongo_uri:
        return None

    listeners: list[monitoring.TopologyListener | monitoring.CommandListener] = [
        ConnectionLifecycleLogger()
    ]
    if settings.mongo_debug:
        listeners.append(CommandDebugLogger())

    client: MongoClient | None = None
    try:
        client = MongoClient(
            settings.mongo_uri,
            appname=settings.app_name,
            tz_aware=True,
            event_listeners=listeners,
            # fixed delay between reconnect attempts; the monitor never gives up
            heartbeatFrequencyMS=settings.mongo_reconnect_interval_ms,
            # operations fail fast while disconnected instead of waiting for a server
            serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
            connectTimeoutMS=settings.mongo_server_selection_timeout_ms,
        )
        client.admin.command("ping")
    except PyMongoError as exc:
        # ConfigurationError (bad URI or options) is a PyMongoError too
        logger.error("core.mongo - connection - error - %s", exc)
        close(client)
        raise ConnectionBootstrapError(f"cannot reach MongoDB: {exc}") from exc
    return client


def get_database(client: MongoClient | None, settings: Settings):
    """Return the configured database handle, or ``None`` when not connected."""
    if client is None:
        return None
    return client[settings.mongo_db_name]


def close(client: MongoClient | None) -> None:
    if client is not None:
        client.close()
