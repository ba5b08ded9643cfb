from ammkit.exceptions.base import AmmError, NotFound

"""
Exceptions defined here are raised by classes and functions in the `registry` module.
"""


class RegistryError(AmmError):
    """
    Exception raised inside registries.
    """


class PoolNotFound(RegistryError, NotFound):
    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(message=f"No pool registered for {key}.")
