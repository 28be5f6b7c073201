from enum import Enum
from typing import List
from webserver.types.base import BaseModel


class PodState(Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class PodStatus(BaseModel):
    """Observed state of one application pod."""

    name: str
    pod_ip: str
    state: PodState


class WebServerStatus(BaseModel):
    """WebServer CRD status"""

    pods: List[PodStatus]
