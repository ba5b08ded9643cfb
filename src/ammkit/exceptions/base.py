class AmmError(Exception):
    """
    Base exception used as the parent class for all exceptions raised by this package.

    Calling code should catch `AmmError` and derived classes separately before general
    exceptions, e.g.:

    ```
    try:
        ammkit.some_function()
    except SpecificAmmError:
        ... # handle a specific exception
    except AmmError:
        ... # handle non-specific ammkit exception
    except Exception:
        ... # handle exceptions raised by 3rd party dependencies or Python built-ins
    ```

    An optional string-formatted message may be attached to the exception and retrieved by accessing
    the `.message` attribute.
    """

    message: str | None = None

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
            super().__init__(message)


class AmmValueError(AmmError): ...


class AmmTypeError(AmmError): ...


# Error categories. Exceptions raised by the subsystems derive from one of these, so callers can
# handle a whole category without knowing which component raised it.


class NotFound(AmmError):
    """
    A pool, tick, or token is absent.
    """


class InvalidState(AmmError):
    """
    State is uninitialized or internally inconsistent.
    """


class Underflow(AmmError):
    """
    Liquidity or amount arithmetic would leave its valid range.
    """


class UnsupportedPool(AmmError):
    """
    The pool cannot be simulated faithfully.
    """


class UpstreamFailure(AmmError):
    """
    An injected data provider failed or timed out.
    """
