from .webserver import WebServer, TargetResource

__all__ = ["WebServer", "TargetResource"]
