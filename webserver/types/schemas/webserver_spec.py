from typing import Any
from marshmallow import (
    fields,
    pre_load,
    validates,
    validates_schema,
    ValidationError,
)
from webserver.types.base import BaseSchema, JSON
from webserver.types.models.webserver_spec import (
    WebServerHealthCheck,
    WebAppBuilder,
    WebApp,
    WebImage,
    WebSourcesParams,
    WebSources,
    WebImageStream,
    WebServerSpec,
)


class OptionalFieldsSchema(BaseSchema):
    """Treats empty strings the same as absent keys so defaults apply."""

    @pre_load
    def drop_empty_strings(self, data: JSON, **kwargs: Any) -> JSON:
        if not isinstance(data, dict):
            return data
        return {key: value for key, value in data.items() if value != ""}


class WebServerHealthCheckSchema(OptionalFieldsSchema):
    __model__ = WebServerHealthCheck

    server_readiness_script = fields.Str(
        data_key="serverReadinessScript", allow_none=True, load_default=None
    )
    server_liveness_script = fields.Str(
        data_key="serverLivenessScript", allow_none=True, load_default=None
    )


class WebAppBuilderSchema(OptionalFieldsSchema):
    __model__ = WebAppBuilder

    image = fields.Str(data_key="image", required=True)
    application_build_script = fields.Str(
        data_key="applicationBuildScript", allow_none=True, load_default=None
    )


class WebAppSchema(OptionalFieldsSchema):
    __model__ = WebApp

    name = fields.Str(data_key="name", load_default="ROOT")
    deploy_path = fields.Str(data_key="deployPath", load_default="/deployments/")
    application_size_limit = fields.Str(
        data_key="applicationSizeLimit", load_default="1Gi"
    )
    source_repository_url = fields.Str(
        data_key="sourceRepositoryURL", allow_none=True, load_default=None
    )
    source_repository_ref = fields.Str(
        data_key="sourceRepositoryRef", allow_none=True, load_default=None
    )
    context_dir = fields.Str(data_key="contextDir", allow_none=True, load_default=None)
    builder = fields.Nested(WebAppBuilderSchema(), data_key="builder", required=True)


class WebImageSchema(OptionalFieldsSchema):
    __model__ = WebImage

    application_image = fields.Str(data_key="applicationImage", required=True)
    web_app = fields.Nested(
        WebAppSchema(), data_key="webApp", allow_none=True, load_default=None
    )
    web_server_health_check = fields.Nested(
        WebServerHealthCheckSchema(),
        data_key="webServerHealthCheck",
        allow_none=True,
        load_default=None,
    )


class WebSourcesParamsSchema(OptionalFieldsSchema):
    __model__ = WebSourcesParams

    maven_mirror_url = fields.Str(
        data_key="mavenMirrorURL", allow_none=True, load_default=None
    )
    artifact_dir = fields.Str(data_key="artifactDir", allow_none=True, load_default=None)
    generic_webhook_secret = fields.Str(
        data_key="genericWebhookSecret", allow_none=True, load_default=None
    )
    github_webhook_secret = fields.Str(
        data_key="githubWebhookSecret", allow_none=True, load_default=None
    )


class WebSourcesSchema(OptionalFieldsSchema):
    __model__ = WebSources

    source_repository_url = fields.Str(data_key="sourceRepositoryURL", required=True)
    source_repository_ref = fields.Str(
        data_key="sourceRepositoryRef", allow_none=True, load_default=None
    )
    context_dir = fields.Str(data_key="contextDir", allow_none=True, load_default=None)
    web_sources_params = fields.Nested(
        WebSourcesParamsSchema(),
        data_key="webSourcesParams",
        allow_none=True,
        load_default=None,
    )


class WebImageStreamSchema(OptionalFieldsSchema):
    __model__ = WebImageStream

    image_stream_name = fields.Str(data_key="imageStreamName", required=True)
    image_stream_namespace = fields.Str(data_key="imageStreamNamespace", required=True)
    web_sources = fields.Nested(
        WebSourcesSchema(), data_key="webSources", allow_none=True, load_default=None
    )
    web_server_health_check = fields.Nested(
        WebServerHealthCheckSchema(),
        data_key="webServerHealthCheck",
        allow_none=True,
        load_default=None,
    )


class WebServerSpecSchema(BaseSchema):
    __model__ = WebServerSpec

    application_name = fields.Str(data_key="applicationName", required=True)
    use_session_clustering = fields.Bool(
        data_key="useSessionClustering", load_default=False
    )
    web_image = fields.Nested(
        WebImageSchema(), data_key="webImage", allow_none=True, load_default=None
    )
    web_image_stream = fields.Nested(
        WebImageStreamSchema(),
        data_key="webImageStream",
        allow_none=True,
        load_default=None,
    )

    @validates("application_name")
    def validate_application_name(self, value: str, **kwargs: Any):
        if not value:
            raise ValidationError("Application name must not be empty.")

    @validates_schema
    def validate_image_source(self, data: JSON, **kwargs: Any):
        """Exactly one of `webImage` and `webImageStream` must be given."""
        sources = [
            data.get("web_image"),
            data.get("web_image_stream"),
        ]
        populated = [source for source in sources if source is not None]
        if len(populated) != 1:
            raise ValidationError(
                "Exactly one of webImage or webImageStream must be specified."
            )
