import copy
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Optional, Sequence

from cmsfix.store.base import ContentStore, StoreError


def _project(doc: dict[str, Any]) -> dict[str, Any]:
    """Mirror the title coalescing done by the Sanity query projection."""
    row = copy.deepcopy(doc)
    row["title"] = (doc.get("metadata") or {}).get("title") or doc.get("title") or doc.get("name")
    return row


@dataclass
class MemoryStore(ContentStore):
    _docs: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_documents(cls, documents: Sequence[dict[str, Any]]) -> "MemoryStore":
        return cls({d["_id"]: copy.deepcopy(d) for d in documents})

    def get(self, doc_id: str) -> dict[str, Any] | None:
        return self._docs.get(doc_id)

    def fetch_documents(self, doc_type: str, id_pattern: Optional[str] = None) -> list[dict[str, Any]]:
        return [
            _project(d) for d in self._docs.values()
            if d.get("_type") == doc_type and (id_pattern is None or fnmatchcase(d["_id"], id_pattern))
        ]

    def fetch_persons(self, person_type: str = "person") -> list[dict[str, Any]]:
        return [{"_id": d["_id"], "name": d.get("name")} for d in self._docs.values() if d.get("_type") == person_type]

    def patch(self, doc_id: str, fields: dict[str, Any]) -> None:
        if doc_id not in self._docs:
            raise StoreError(f"Document {doc_id} not found")
        self._docs[doc_id].update(copy.deepcopy(fields))

    def delete(self, doc_id: str) -> bool:
        return self._docs.pop(doc_id, None) is not None

    def delete_many(self, doc_ids: Sequence[str]) -> int:
        return sum(self.delete(i) for i in doc_ids)
