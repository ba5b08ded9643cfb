from ammkit.exceptions.base import AmmError


class RouterError(AmmError):
    """
    Exception raised while encoding router call data.
    """


class InvalidRoute(RouterError):
    """
    Raised when a swap route cannot be encoded.
    """
