"""Content store interface consumed by the migration commands"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class StoreError(RuntimeError):
    """A fetch or mutation against the content store failed."""


class ContentStore(ABC):
    @abstractmethod
    def fetch_documents(self, doc_type: str, id_pattern: Optional[str] = None) -> list[dict[str, Any]]:
        """Return raw documents of doc_type, optionally filtered by a glob on _id (drafts included)."""
        raise NotImplementedError

    @abstractmethod
    def fetch_persons(self, person_type: str = "person") -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def patch(self, doc_id: str, fields: dict[str, Any]) -> None:
        """Set top-level fields on one document."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, doc_id: str) -> bool:
        """Delete one document. Returns False (not an error) when it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def delete_many(self, doc_ids: Sequence[str]) -> int:
        """Delete all ids in a single transaction. Returns the number deleted."""
        raise NotImplementedError
