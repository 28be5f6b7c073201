from webserver.handlers import probes, webserver

__all__ = ["probes", "webserver"]
