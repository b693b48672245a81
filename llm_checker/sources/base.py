"""Protocol shared by discovery providers."""

from typing import Protocol


class DiscoveryProvider(Protocol):
    """Source of raw candidate records.

    Implementations return listing items in the Hugging Face listing shape
    (see ``normalizer.normalize_candidate``).  An empty list is a valid
    answer; a failure must raise instead of returning ``[]``.
    """

    name: str

    @property
    def source(self) -> str:
        """Human-readable request target, used in activity logs."""
        ...

    async def discover(self) -> list[dict]:
        """Return the newest candidates, newest first."""
        ...
