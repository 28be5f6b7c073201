from .platform import PlatformCapability
from .pod_status import PodState, PodStatus, WebServerStatus
from .webserver_resources import WebServerResources
from .webserver_spec import (
    WebServerHealthCheck,
    WebAppBuilder,
    WebApp,
    WebImage,
    WebSourcesParams,
    WebSources,
    WebImageStream,
    WebServerSpec,
)
