import os
from typing import Any

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Discover session clustering peers through the platform API (KUBE_PING style)
#: rather than through DNS lookups of the headless service.
USE_KUBE_PING = bool(_getenv("USE_KUBE_PING", True))

#: Seconds to wait before re-running a reconcile pass that left work pending
REQUEUE_DELAY_SECONDS = int(_getenv("REQUEUE_DELAY_SECONDS", 5))

#: Seconds between periodic reconcile passes of every WebServer
RECONCILE_INTERVAL_SECONDS = float(_getenv("RECONCILE_INTERVAL_SECONDS", 30.0))

#: API group whose presence marks the cluster as an extended (OpenShift) platform
EXTENDED_PLATFORM_API_GROUP = str(
    _getenv("EXTENDED_PLATFORM_API_GROUP", "route.openshift.io")
)

#: Port serving the Prometheus metrics endpoint
METRICS_PORT = int(_getenv("METRICS_PORT", 8000))

#: Maximum number of concurrent kopf workers
WORKER_LIMIT = int(_getenv("WORKER_LIMIT", 4))


class Settings:
    """Operator settings"""

    use_kube_ping: bool = USE_KUBE_PING
    requeue_delay_seconds: int = REQUEUE_DELAY_SECONDS
    extended_platform_api_group: str = EXTENDED_PLATFORM_API_GROUP
    worker_limit: int = WORKER_LIMIT
    metrics_port: int = METRICS_PORT

    def __init__(
        self,
        *args,
        use_kube_ping: bool = None,
        requeue_delay_seconds: int = None,
        extended_platform_api_group: str = None,
        worker_limit: int = None,
        metrics_port: int = None,
        **kwargs,
    ):
        if use_kube_ping is not None:
            self.use_kube_ping = use_kube_ping

        if requeue_delay_seconds is not None:
            self.requeue_delay_seconds = requeue_delay_seconds

        if extended_platform_api_group is not None:
            self.extended_platform_api_group = extended_platform_api_group

        if worker_limit is not None:
            self.worker_limit = worker_limit

        if metrics_port is not None:
            self.metrics_port = metrics_port
