"""
Data fetching exceptions for the ammkit package.

These are raised by the state synchronizer when the injected data provider fails.
"""

from ammkit.exceptions.base import UpstreamFailure


class FetchingError(UpstreamFailure):
    """
    Base exception for data fetching errors.
    """


class BatchFetchError(FetchingError):
    """
    Raised when a single batch request fails after all retry attempts.
    """

    def __init__(self, kind: str, batch_size: int, attempts: int) -> None:
        self.kind = kind
        self.batch_size = batch_size
        self.attempts = attempts
        super().__init__(
            message=f"Failed to fetch {kind} batch of {batch_size} pools after {attempts} tries."
        )


class SyncFailed(FetchingError):
    """
    Raised when every batch of a synchronization pass fails.
    """

    def __init__(self, chain_id: int, batches: int) -> None:
        self.chain_id = chain_id
        self.batches = batches
        super().__init__(message=f"All {batches} batches failed for chain {chain_id}.")
