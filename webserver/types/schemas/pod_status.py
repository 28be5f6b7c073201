from marshmallow import fields
from webserver.types.base import BaseSchema
from webserver.types.models.pod_status import PodState, PodStatus, WebServerStatus


class PodStatusSchema(BaseSchema):
    __model__ = PodStatus

    name = fields.Str(data_key="name", required=True)
    pod_ip = fields.Str(data_key="podIP", load_default="")
    state = fields.Enum(PodState, by_value=True, data_key="state", required=True)


class WebServerStatusSchema(BaseSchema):
    __model__ = WebServerStatus

    pods = fields.List(
        fields.Nested(PodStatusSchema()), data_key="pods", load_default=list
    )
