"""
Error types raised by the planner core.

Validation problems subclass ValueError and upstream failures subclass
RuntimeError so routers can map them the same way they map built-in errors.
"""


class PlanValidationError(ValueError):
    """Input rejected locally, before any state change or network call."""


class GenerationError(RuntimeError):
    """The text-generation collaborator failed or is not configured."""

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.detail = detail


class CommunicationError(GenerationError):
    """The text-generation collaborator could not be reached."""
