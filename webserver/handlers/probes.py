import kopf
from webserver.utils.helpers import now


# Liveness probe
@kopf.on.probe(id="now")
def get_current_timestamp(**kwargs):
    return now()


@kopf.on.probe(id="platform")
def get_platform(memo: kopf.Memo, **kwargs):
    """Capability the operator classified the cluster as at startup."""
    platform = memo.get("platform")
    return platform.value if platform is not None else None
