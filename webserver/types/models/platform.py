from enum import Enum


class PlatformCapability(Enum):
    """API surface offered by the cluster.

    `EXTENDED` adds routes, image streams, build configs and deployment configs
    on top of the `BASELINE` Kubernetes API set.
    """

    BASELINE = "baseline"
    EXTENDED = "extended"

    @property
    def extended(self) -> bool:
        return self is PlatformCapability.EXTENDED
