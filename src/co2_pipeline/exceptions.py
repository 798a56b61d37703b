# Exceptions raised by the engine when a computation has no meaningful value.


class InvalidInputError(ValueError):
    """Raised when an input (or a quantity derived from inputs) makes a result undefined.

    ``quantity`` names the offending quantity so callers can point the user at it.
    """

    def __init__(self, quantity: str, message: str = ""):
        self.quantity = quantity
        super().__init__(f"Invalid {quantity}: {message}" if message else f"Invalid {quantity}")
