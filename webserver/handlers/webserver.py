import kopf
from logging import Logger
from typing import Any, Dict
from marshmallow import ValidationError
from kubernetes_asyncio.client import ApiException
from webserver.resources import WebServer
from webserver.types.models import PlatformCapability, WebServerSpec
from webserver.types.schemas import WebServerSpecSchema
from webserver.types.settings import RECONCILE_INTERVAL_SECONDS, Settings
from webserver.utils.errors import convert_api_exception

KIND = "WebServer"
GROUP = WebServer.GROUP_NAME


def load_spec(spec: Dict[str, Any]) -> WebServerSpec:
    """Load the WebServer spec, rejecting specs that can never be reconciled."""
    try:
        return WebServerSpecSchema().load(dict(spec))
    except ValidationError as ex:
        raise kopf.PermanentError(f"Invalid WebServer spec: {ex.messages}")


async def reconcile(
    body,
    spec,
    name: str,
    namespace: str,
    labels,
    patch: kopf.Patch,
    memo: kopf.Memo,
    logger: Logger,
    trigger_source: str,
) -> None:
    """Run one reconcile pass: create missing resources, then report pod status.

    Raises `kopf.TemporaryError` after the status is published when resources
    were just created or pods still lack an IP address, so the pass runs again.
    """
    spec_model = load_spec(spec)
    conf: Settings = memo.get("conf") or WebServer.conf
    platform: PlatformCapability = memo.get("platform", PlatformCapability.BASELINE)
    server = WebServer.from_spec(
        name,
        KIND,
        namespace,
        spec_model,
        owner=body,
        labels=dict(labels or {}),
        logger=logger,
        conf=conf,
    )

    sensor_state = server.sensor.on_reconcile_start(name, namespace, trigger_source)
    try:
        created = await server.synchronize(platform)
        status, pods_pending = await server.fetch_pod_status()
        server.publish_status(patch, status)
    except ApiException as ex:
        server.sensor.on_reconcile_complete(name, namespace, sensor_state, False, ex)
        logger.error(f"Failed to reconcile WebServer: {ex}")
        # Every platform error is transient, auth failures included
        convert_api_exception(ex, permanent=False)
    except Exception as ex:
        server.sensor.on_reconcile_complete(name, namespace, sensor_state, False, ex)
        logger.exception(f"Failed to reconcile WebServer: {ex}")
        raise
    server.sensor.on_reconcile_complete(name, namespace, sensor_state, True)

    if created or pods_pending:
        raise kopf.TemporaryError(
            "WebServer is not ready yet, reconciliation requeue scheduled.",
            delay=conf.requeue_delay_seconds,
        )


@kopf.on.resume(kind=KIND, group=GROUP)
@kopf.on.create(kind=KIND, group=GROUP)
async def on_create(
    body, spec, name, namespace, labels, patch, memo, logger: Logger, **kwargs
):
    """Creates WebServer resources."""
    await reconcile(
        body, spec, name, namespace, labels, patch, memo, logger, "create"
    )


@kopf.on.update(kind=KIND, group=GROUP, field="spec")
async def on_update(
    body, spec, name, namespace, labels, patch, memo, logger: Logger, **kwargs
):
    """Creates resources a changed spec asks for. Existing ones are kept as is."""
    await reconcile(
        body, spec, name, namespace, labels, patch, memo, logger, "update"
    )


@kopf.timer(kind=KIND, group=GROUP, interval=RECONCILE_INTERVAL_SECONDS)
async def reconcile_timer(
    body, spec, name, namespace, labels, patch, memo, logger: Logger, **kwargs
):
    """Periodic pass restoring deleted resources and refreshing pod status."""
    await reconcile(body, spec, name, namespace, labels, patch, memo, logger, "timer")
