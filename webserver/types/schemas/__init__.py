from .pod_status import PodStatusSchema, WebServerStatusSchema
from .webserver_spec import (
    WebServerHealthCheckSchema,
    WebAppBuilderSchema,
    WebAppSchema,
    WebImageSchema,
    WebSourcesParamsSchema,
    WebSourcesSchema,
    WebImageStreamSchema,
    WebServerSpecSchema,
)
