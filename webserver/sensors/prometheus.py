"""Prometheus monitoring backend for the WebServer operator.

Metric categories:

1. Reconcile pass health - duration, throughput, errors
2. Resource creation - counts and latency per resource kind
3. Pod readiness and status updates
"""

from typing import Any, Dict, List, Optional
import time
import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from webserver.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor for the WebServer operator.

    Metrics are registered on `registry`, the process wide default unless
    another one is given.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        super().__init__()

        # =============================================================================
        # Reconciliation Loop Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            "webserverop_reconcile_duration_seconds",
            "Time spent in a reconcile pass",
            labelnames=["name", "namespace", "trigger_source", "result"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=registry,
        )

        self.reconcile_total = Counter(
            "webserverop_reconcile_total",
            "Total number of reconcile passes",
            labelnames=["name", "namespace", "trigger_source", "result"],
            registry=registry,
        )

        self.reconcile_errors = Counter(
            "webserverop_reconcile_errors_total",
            "Total number of failed reconcile passes",
            labelnames=["name", "namespace", "error_type"],
            registry=registry,
        )

        # =============================================================================
        # Resource Creation Metrics
        # =============================================================================

        self.resource_create_duration = Histogram(
            "webserverop_resource_create_duration_seconds",
            "Time spent creating missing resources",
            labelnames=["name", "namespace", "resource_type", "result"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
            registry=registry,
        )

        self.resource_create_total = Counter(
            "webserverop_resource_create_total",
            "Total number of resource create calls",
            labelnames=["name", "namespace", "resource_type", "result"],
            registry=registry,
        )

        # =============================================================================
        # Pod and Status Metrics
        # =============================================================================

        self.pods_total = Gauge(
            "webserverop_pods",
            "Number of application pods observed in the last pass",
            labelnames=["name", "namespace"],
            registry=registry,
        )

        self.pods_pending = Gauge(
            "webserverop_pods_pending",
            "Number of application pods without an IP address",
            labelnames=["name", "namespace"],
            registry=registry,
        )

        self.status_updates = Counter(
            "webserverop_status_updates_total",
            "Total number of status updates",
            labelnames=["name", "namespace", "update_field"],
            registry=registry,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self, name: str, namespace: str, trigger_source: str
    ) -> Optional[Dict[str, Any]]:
        """Record reconciliation start time."""
        return {
            "start_time": time.time(),
            "trigger_source": trigger_source,
        }

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Record reconciliation duration and result."""
        if state:
            duration = time.time() - state["start_time"]
            result = "success" if success else "failure"
            labels = dict(
                name=name,
                namespace=namespace,
                trigger_source=state["trigger_source"],
                result=result,
            )
            self.reconcile_duration.labels(**labels).observe(duration)
            self.reconcile_total.labels(**labels).inc()

        if error:
            self.reconcile_errors.labels(
                name=name,
                namespace=namespace,
                error_type=error.__class__.__name__,
            ).inc()

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_create_start(
        self, name: str, resource_name: str, namespace: str, resource_type: str
    ) -> Optional[Dict[str, Any]]:
        return {"start_time": time.time()}

    def on_resource_create_complete(
        self,
        name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Record resource creation duration and result."""
        result = "success" if success else "failure"
        labels = dict(
            name=name,
            namespace=namespace,
            resource_type=resource_type,
            result=result,
        )
        if state:
            self.resource_create_duration.labels(**labels).observe(
                time.time() - state["start_time"]
            )
        self.resource_create_total.labels(**labels).inc()

    # =============================================================================
    # Pod Status Hooks
    # =============================================================================

    def on_pods_pending(
        self, name: str, namespace: str, total: int, pending: int
    ) -> None:
        self.pods_total.labels(name=name, namespace=namespace).set(total)
        self.pods_pending.labels(name=name, namespace=namespace).set(pending)

    def on_status_update(
        self, name: str, namespace: str, update_fields: List[str]
    ) -> None:
        """Record status update."""
        for field in update_fields:
            self.status_updates.labels(
                name=name,
                namespace=namespace,
                update_field=field,
            ).inc()
