"""Base sensor classes for operator monitoring.

All hooks are no-ops by default, allowing subclasses to override only the
events they care about.

- Hooks come in pairs: on_X_start() and on_X_complete()
- Start hooks return an optional state dict for tracking multi-phase operations
- Complete hooks receive the state dict from their corresponding start hook
"""

from typing import Any, Dict, List, Optional


class OperatorSensor:
    """Base sensor class for WebServer operator monitoring.

    Example:
        class LoggingSensor(OperatorSensor):
            def on_reconcile_start(self, name, namespace, trigger_source):
                return {'start_time': time.time()}

            def on_reconcile_complete(self, name, namespace, state, success, error=None):
                duration = time.time() - state['start_time']
                logger.info(f"Reconciled {name} in {duration}s")
    """

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        name: str,
        namespace: str,
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        """Called when a reconcile pass begins.

        Args:
            name: WebServer resource name
            namespace: Kubernetes namespace
            trigger_source: What triggered the pass (create, resume, update, timer)

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a reconcile pass completes.

        Args:
            name: WebServer resource name
            namespace: Kubernetes namespace
            state: State dict returned from on_reconcile_start
            success: Whether the pass succeeded
            error: Exception if the pass failed
        """
        pass

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_create_start(
        self,
        name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
    ) -> Optional[Dict[str, Any]]:
        """Called before a missing resource is created.

        Args:
            name: Owning WebServer resource name
            resource_name: Name of the resource being created
            namespace: Kubernetes namespace
            resource_type: Kind of the resource (Service, Deployment, ...)
        """
        pass

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
        """Called after a resource create call returned or failed."""
        pass

    # =============================================================================
    # Pod Status Hooks
    # =============================================================================

    def on_pods_pending(
        self,
        name: str,
        namespace: str,
        total: int,
        pending: int,
    ) -> None:
        """Called after pod status aggregation.

        Args:
            name: WebServer resource name
            namespace: Kubernetes namespace
            total: Number of pods observed
            pending: Number of pods without an IP address
        """
        pass

    def on_status_update(
        self,
        name: str,
        namespace: str,
        update_fields: List[str],
    ) -> None:
        """Called when status is updated.

        Args:
            name: WebServer resource name
            namespace: Kubernetes namespace
            update_fields: List of status fields that were updated
        """
        pass
