from typing import Dict, Optional


class ResourceLabels:
    APPLICATION_LABEL = "application"

    DEPLOYMENT_CONFIG_LABEL = "deploymentConfig"

    WEBSERVER_LABEL = "WebServer"


class Labels(ResourceLabels):
    """Immutable set of labels.

    Every `include_*` or `merge` call returns a new instance and leaves the
    receiver untouched, so a shared base selector can be extended freely.
    """

    _labels: Dict[str, str]

    def __init__(self, labels: Optional[Dict[str, str]] = None) -> None:
        self._labels = dict(labels) if labels else dict()

    def merge(self, overrides: Optional[Dict[str, str]]) -> "Labels":
        """Return new labels with `overrides` applied on top of these."""
        merged = self.as_dict()
        merged.update(overrides or {})
        return Labels(merged)

    def as_dict(self) -> Dict[str, str]:
        """Return labels are dictionary."""
        return self._labels.copy()

    def as_str(self):
        """Return labels as comma separated string."""
        return ",".join([f"{k}={v}" for k, v in self._labels.items()])

    def include(self, label: str, value: str) -> "Labels":
        return self.merge({label: value})

    def include_application(self, application_name: str) -> "Labels":
        return self.include(self.APPLICATION_LABEL, application_name)

    def include_deployment_config(self, application_name: str) -> "Labels":
        return self.include(self.DEPLOYMENT_CONFIG_LABEL, application_name)

    def include_webserver(self, webserver_name: str) -> "Labels":
        return self.include(self.WEBSERVER_LABEL, webserver_name)

    def __eq__(self, other) -> bool:
        return isinstance(other, Labels) and self._labels == other._labels

    def __str__(self):
        return f"Labels<{self._labels}>"
