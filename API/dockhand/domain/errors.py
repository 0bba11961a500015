"""
Typed failures raised by the orchestration layer.

The serving layer maps every ``DockhandError`` to a flat ``{"message": ...}``
body, so ``message`` must always be human readable.
"""


class DockhandError(Exception):
    """Base exception for dockhand."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(DockhandError):
    """Malformed request body."""


class CancelledError(DockhandError):
    """An engine call was cancelled or ran past its deadline."""


class EngineError(DockhandError):
    """Generic engine-call failure, engine message passed through."""


class NotFoundError(EngineError):
    pass


class PullError(EngineError):
    pass


class CreateError(EngineError):
    pass


class StartError(EngineError):
    """
    Starting a container failed.

    When raised after a successful create, ``container_id`` names the
    container left behind in the created state and ``result`` holds the
    engine's creation response.
    """

    def __init__(self, message: str, container_id: str | None = None, result=None):
        super().__init__(message)
        self.container_id = container_id
        self.result = result


class StopError(EngineError):
    pass


class RemoveError(EngineError):
    pass
