"""Unit tests for loading WebServer specs."""

import pytest
from marshmallow import ValidationError
from webserver.types.models import WebImage, WebImageStream, WebServerSpec
from webserver.types.schemas import WebServerSpecSchema


class TestWebServerSpecSchema:
    """Tests for WebServerSpecSchema."""

    def test_load_web_image(self, image_spec):
        spec = WebServerSpecSchema().load(image_spec)
        assert isinstance(spec, WebServerSpec)
        assert spec.application_name == "demo"
        assert spec.use_session_clustering is False
        assert isinstance(spec.image_source, WebImage)
        assert spec.image_source.application_image == "quay.io/x/demo:latest"
        assert spec.image_source.web_app is None
        assert spec.health_check is None

    def test_load_web_image_stream(self, image_stream_spec):
        spec = WebServerSpecSchema().load(image_stream_spec)
        assert isinstance(spec.image_source, WebImageStream)
        sources = spec.image_source.web_sources
        assert sources.source_repository_ref == "main"
        assert sources.web_sources_params.maven_mirror_url == "https://maven.example.com/"
        assert sources.web_sources_params.generic_webhook_secret is None

    def test_web_app_defaults(self, web_app_spec):
        web_app = WebServerSpecSchema().load(web_app_spec).image_source.web_app
        assert web_app.name == "ROOT"
        assert web_app.deploy_path == "/deployments/"
        assert web_app.application_size_limit == "1Gi"
        assert web_app.war_file_name == "ROOT.war"
        assert web_app.builder.application_build_script is None

    def test_empty_strings_use_defaults(self, web_app_spec):
        web_app_spec["webImage"]["webApp"].update(
            {"name": "", "deployPath": "", "applicationSizeLimit": ""}
        )
        web_app_spec["webImage"]["webApp"]["builder"]["applicationBuildScript"] = ""
        web_app = WebServerSpecSchema().load(web_app_spec).image_source.web_app
        assert web_app.name == "ROOT"
        assert web_app.deploy_path == "/deployments/"
        assert web_app.application_size_limit == "1Gi"
        assert web_app.builder.application_build_script is None

    def test_health_check(self, image_spec):
        image_spec["webImage"]["webServerHealthCheck"] = {
            "serverReadinessScript": 'shell -c "ready"',
        }
        spec = WebServerSpecSchema().load(image_spec)
        assert spec.health_check.server_readiness_script == 'shell -c "ready"'
        assert spec.health_check.server_liveness_script is None

    def test_both_image_sources_rejected(self, image_spec, image_stream_spec):
        image_spec["webImageStream"] = image_stream_spec["webImageStream"]
        with pytest.raises(ValidationError):
            WebServerSpecSchema().load(image_spec)

    def test_no_image_source_rejected(self):
        with pytest.raises(ValidationError):
            WebServerSpecSchema().load({"applicationName": "demo"})

    def test_application_name_required(self, image_spec):
        del image_spec["applicationName"]
        with pytest.raises(ValidationError) as exc_info:
            WebServerSpecSchema().load(image_spec)
        assert "applicationName" in exc_info.value.messages

    def test_empty_application_name_rejected(self, image_spec):
        image_spec["applicationName"] = ""
        with pytest.raises(ValidationError):
            WebServerSpecSchema().load(image_spec)

    def test_builder_image_required(self, web_app_spec):
        del web_app_spec["webImage"]["webApp"]["builder"]["image"]
        with pytest.raises(ValidationError):
            WebServerSpecSchema().load(web_app_spec)
