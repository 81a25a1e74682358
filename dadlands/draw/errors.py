"""Exceptions raised by the draw system."""


class DrawError(Exception):
    """Base class for draw system errors."""

    pass


class InsufficientPoolError(DrawError):
    """Raised when a move asks to draw more tokens than the pool holds."""

    def __init__(self, difficulty: int, available: int):
        self.difficulty = difficulty
        self.available = available
        super().__init__(
            f"Cannot draw {difficulty} tokens from a pool of {available}"
        )


class InvalidTransitionError(DrawError):
    """Raised when a resolution step is called out of order."""

    pass
