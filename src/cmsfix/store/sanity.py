"""Sanity HTTP API adapter: GROQ queries and mutations over requests"""

import json
import logging
from typing import Any, Optional, Sequence

import requests

from cmsfix.config import Settings
from cmsfix.store.base import ContentStore, StoreError


LOGGER = logging.getLogger(__name__)

DOCUMENT_PROJECTION = '{ ..., "title": coalesce(metadata.title, title, name) }'


class SanityStore(ContentStore):
    """One request per call; no retries."""

    def __init__(
        self,
        project_id: str,
        dataset: str,
        api_version: str = "2024-01-01",
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        ):
        self.base_url = f"https://{project_id}.api.sanity.io/v{api_version}/data"
        self.dataset = dataset
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SanityStore":
        return cls(
            project_id=settings.project_id,
            dataset=settings.dataset,
            api_version=settings.api_version,
            token=settings.token,
            timeout=settings.timeout,
        )

    def _request(self, method: str, endpoint: str, **kwargs) -> dict[str, Any]:
        url = f"{self.base_url}/{endpoint}/{self.dataset}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"{method} {endpoint} failed: {e}") from e
        if response.status_code >= 400:
            raise StoreError(f"{method} {endpoint} returned HTTP {response.status_code}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {endpoint} returned invalid JSON") from e

    def query(self, groq: str, **params: Any) -> Any:
        """Run a GROQ query; params are passed as JSON-encoded $name query arguments."""
        args = {"query": groq, **{f"${k}": json.dumps(v) for k, v in params.items()}}
        LOGGER.debug("GROQ %s %s", groq, params)
        return self._request("GET", "query", params=args).get("result")

    def mutate(self, mutations: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Submit mutations as one transaction. Returns the per-document results."""
        LOGGER.debug("Mutating %d operation(s)", len(mutations))
        body = self._request("POST", "mutate", params={"returnIds": "true"}, json={"mutations": mutations})
        return body.get("results", [])

    def fetch_documents(self, doc_type: str, id_pattern: Optional[str] = None) -> list[dict[str, Any]]:
        if id_pattern is None:
            return self.query(f"*[_type == $type]{DOCUMENT_PROJECTION}", type=doc_type) or []
        return self.query(
            f"*[_type == $type && _id match $pattern]{DOCUMENT_PROJECTION}",
            type=doc_type, pattern=id_pattern,
        ) or []

    def fetch_persons(self, person_type: str = "person") -> list[dict[str, Any]]:
        return self.query("*[_type == $type]{ _id, name }", type=person_type) or []

    def patch(self, doc_id: str, fields: dict[str, Any]) -> None:
        self.mutate([{"patch": {"id": doc_id, "set": fields}}])

    def delete(self, doc_id: str) -> bool:
        return bool(self.mutate([{"delete": {"id": doc_id}}]))

    def delete_many(self, doc_ids: Sequence[str]) -> int:
        if not doc_ids:
            return 0
        return len(self.mutate([{"delete": {"id": i}} for i in doc_ids]))
