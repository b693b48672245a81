"""Shared exception types for the checker."""


class ProviderError(Exception):
    """Raised when a discovery provider cannot deliver candidates.

    Carries *source* (e.g. "huggingface") and a human-readable *details*
    string describing the transport, status or payload problem.
    """

    def __init__(self, source: str, details: str) -> None:
        self.source = source
        self.details = details
        super().__init__(f"Discovery failed for {source}: {details}")
