"""
Exception types raised by the engine layer.

docker-py raises its own hierarchy (docker.errors.DockerException and
friends); the backend wraps those so the UI only has to know about these.
"""


class EngineError(Exception):
    """An engine call failed."""
    pass


class NotFoundError(EngineError):
    """The engine reported the resource as missing."""
    pass


class EngineUnavailable(EngineError):
    """No live engine client (never connected, or last reconnect failed)."""
    pass


class ConnectionSetupError(EngineError):
    """Building the engine client from connection settings failed."""
    pass
