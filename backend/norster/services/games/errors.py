class GameError(Exception):
    """Base class for engine errors. ``status_code`` is used by the HTTP layer."""

    status_code = 400

    @property
    def code(self) -> str:
        return type(self).__name__


class InvalidSetup(GameError):
    """Malformed player configuration; no engine is created."""


class InvalidAction(GameError):
    """Action not permitted in the current phase."""
    status_code = 409


class InsufficientTokens(GameError):
    """Skip attempted with no tokens left."""
    status_code = 409


class EmptyCatalog(GameError):
    """Draw attempted on an engine that holds no tracks at all."""
    status_code = 409
