"""Abstract interface for the terminal's draft cache."""

from abc import ABC, abstractmethod

from salepoint.core.entities.draft import DraftSnapshot


class IDraftStore(ABC):
    """Interface for persisting in-progress sale drafts."""

    @abstractmethod
    async def save(self, session_key: str, snapshot: DraftSnapshot) -> None:
        """Write the snapshot for a session in a single statement."""
        pass

    @abstractmethod
    async def load(self, session_key: str) -> DraftSnapshot | None:
        """Read the snapshot for a session.

        Raises DraftCacheError if the stored entry cannot be used.
        """
        pass

    @abstractmethod
    async def delete(self, session_key: str) -> bool:
        """Remove the snapshot for a session."""
        pass
