"""Error taxonomy shared by the event router, services and HTTP routes.

Every error carries a short, human-readable ``message`` that is safe to send
back to the client inside an acknowledgement envelope or an ``error`` event.
"""


class GameError(Exception):
    """Base class for errors raised while handling a game event."""

    default_message = 'Something went wrong'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GameError):
    """Malformed or missing input, rejected before any mutation."""

    default_message = 'Invalid request'


class NotFoundError(GameError):
    """A game, question or player identifier does not resolve."""

    default_message = 'Not found'


class AuthorizationError(GameError):
    """Token invalid or expired, or the admin does not own the game."""

    default_message = 'Not authorized'


class ConflictError(GameError):
    """Duplicate write (second vote, colliding join); resolved as a no-op."""

    default_message = 'Already exists'
