"""HTTP server for exposing Prometheus metrics.

Uses the prometheus_client HTTP server in a background thread so that the
operator event loop is never blocked.
"""

import logging
from threading import Thread
from prometheus_client import start_http_server
from webserver.types.settings import METRICS_PORT

logger = logging.getLogger(__name__)


def start_metrics_server(port: int = METRICS_PORT) -> None:
    """Serve metrics at http://0.0.0.0:port/metrics."""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except OSError as e:
        logger.error(f"Failed to start metrics server on port {port}: {e}")
        raise


def init_metrics_server(port: int = METRICS_PORT) -> Thread:
    """Start the metrics server on `port` (METRICS_PORT by default)."""
    # Daemon thread so it doesn't block shutdown
    thread = Thread(target=start_metrics_server, args=(port,), daemon=True)
    thread.start()

    logger.info(f"Metrics server initialization complete (port: {port})")
    return thread
