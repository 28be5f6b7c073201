"""WebServer Operator Sensor Framework.

Hook-based instrumentation of the reconcile pass. Sensors receive events for
the pass itself, for every resource created, for pods still waiting on an
address and for status updates.

Key components:
- OperatorSensor: Base class defining lifecycle hooks for operator events
- SensorDelegate: Fan-out pattern for routing events to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter

Usage:
    from webserver.sensors import SensorDelegate, PrometheusMonitor

    delegate = SensorDelegate()
    delegate.add(PrometheusMonitor())
"""

from webserver.sensors.base import OperatorSensor
from webserver.sensors.delegate import SensorDelegate
from webserver.sensors.prometheus import PrometheusMonitor
from webserver.sensors.server import init_metrics_server

__all__ = [
    "OperatorSensor",
    "SensorDelegate",
    "PrometheusMonitor",
    "init_metrics_server",
]
