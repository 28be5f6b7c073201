import logging
import pytest
from webserver.resources.webserver import WebServer
from webserver.types.schemas import WebServerSpecSchema
from webserver.types.settings import Settings

NAMESPACE = "test-namespace"


@pytest.fixture
def owner():
    """Body of the WebServer custom resource owning generated resources."""
    return {
        "apiVersion": "web.servers.org/v1alpha1",
        "kind": "WebServer",
        "metadata": {"name": "demo", "namespace": NAMESPACE, "uid": "uid-1234"},
    }


@pytest.fixture
def make_server(owner):
    """Factory building a WebServer from a raw CR spec."""

    def _make_server(spec, name="demo", labels=None, conf=None):
        return WebServer.from_spec(
            name=name,
            kind="WebServer",
            namespace=NAMESPACE,
            spec=WebServerSpecSchema().load(spec),
            owner=owner,
            labels=labels,
            logger=logging.getLogger("test"),
            conf=conf or Settings(use_kube_ping=True),
        )

    return _make_server


@pytest.fixture
def image_spec():
    return {
        "applicationName": "demo",
        "webImage": {"applicationImage": "quay.io/x/demo:latest"},
    }


@pytest.fixture
def web_app_spec():
    return {
        "applicationName": "demo",
        "webImage": {
            "applicationImage": "quay.io/x/demo:latest",
            "webApp": {
                "sourceRepositoryURL": "https://github.com/jfclere/demo-webapp.git",
                "builder": {"image": "quay.io/x/builder:latest"},
            },
        },
    }


@pytest.fixture
def image_stream_spec():
    return {
        "applicationName": "demo",
        "webImageStream": {
            "imageStreamName": "jws-image",
            "imageStreamNamespace": "openshift",
            "webSources": {
                "sourceRepositoryURL": "https://github.com/jfclere/demo-webapp.git",
                "sourceRepositoryRef": "main",
                "contextDir": "app",
                "webSourcesParams": {
                    "mavenMirrorURL": "https://maven.example.com/",
                    "githubWebhookSecret": "gh-secret",
                },
            },
        },
    }
