from .lock import ReaderWriterLock
from .pool_registry import PoolRegistry

__all__ = (
    "PoolRegistry",
    "ReaderWriterLock",
)
