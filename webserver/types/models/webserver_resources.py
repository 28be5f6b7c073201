class WebServerResources:
    """Encapsulates the naming scheme used for the resources which the operator
    manages for a WebServer."""

    @classmethod
    def service_name(self, application_name: str):
        """Returns the name of the HTTP service routing to the application pods."""
        return application_name

    @classmethod
    def discovery_name(self, webserver_name: str):
        """Returns the name shared by the headless service, role binding and
        clustering config map of a WebServer."""
        return f"webserver-{webserver_name}"

    @classmethod
    def headless_service_name(self, webserver_name: str):
        return self.discovery_name(webserver_name)

    @classmethod
    def role_binding_name(self, webserver_name: str):
        return self.discovery_name(webserver_name)

    @classmethod
    def config_map_name(self, webserver_name: str):
        return self.discovery_name(webserver_name)

    @classmethod
    def persistent_volume_claim_name(self, application_name: str):
        return application_name

    @classmethod
    def build_pod_name(self, application_name: str):
        return f"{application_name}-build"

    @classmethod
    def deployment_name(self, application_name: str):
        return application_name

    @classmethod
    def image_stream_tag(self, image_stream_name: str):
        return f"{image_stream_name}:latest"
