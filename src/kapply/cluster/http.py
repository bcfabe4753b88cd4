"""HTTP cluster API client (requests)."""

from typing import Any, Dict, Optional
import requests
from ..ingest.models import ObservedState, ResourceKind
from ..utils.errors import ClusterAPIError, TransientAPIError
from ..utils.logging import get_logger
from .base import ClusterAPI

logger = get_logger("cluster.http")

RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class HttpClusterAPI(ClusterAPI):
    """
    REST client for a cluster API.

    Layout: GET/PUT/DELETE {endpoint}/{kinds}/{name}, POST {endpoint}/{kinds}.
    One requests.Session is shared by every call; requests sessions are safe
    for the small worker pool the reconciler uses.
    """

    def __init__(
        self,
        endpoint: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        verify_tls: bool = True,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            endpoint: Cluster API base URL
            token: Optional bearer token
            timeout: Per-call timeout in seconds
            verify_tls: Verify TLS certificates
            session: Optional pre-built session (tests)
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify_tls
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def get(self, kind: ResourceKind, name: str) -> Optional[ObservedState]:
        response = self._request("GET", self._item_url(kind, name), kind, name, allow_not_found=True)
        if response is None:
            return None

        try:
            body = response.json()
            return ObservedState(
                kind=kind,
                name=name,
                data=body.get("data") or {},
                references=body.get("references") or [],
                metadata=body.get("metadata") or {},
            )
        except (ValueError, AttributeError) as e:
            raise ClusterAPIError(f"Unreadable response body for {kind.value}/{name}: {e}")

    def create(self, kind: ResourceKind, name: str, spec: Dict[str, Any]) -> None:
        self._request("POST", f"{self.endpoint}/{kind.plural}", kind, name, json=spec)

    def update(self, kind: ResourceKind, name: str, spec: Dict[str, Any]) -> None:
        self._request("PUT", self._item_url(kind, name), kind, name, json=spec)

    def delete(self, kind: ResourceKind, name: str) -> None:
        self._request("DELETE", self._item_url(kind, name), kind, name)

    def close(self) -> None:
        self.session.close()

    def _item_url(self, kind: ResourceKind, name: str) -> str:
        return f"{self.endpoint}/{kind.plural}/{name}"

    def _request(
        self,
        method: str,
        url: str,
        kind: ResourceKind,
        name: str,
        allow_not_found: bool = False,
        json: Optional[Dict[str, Any]] = None
    ) -> Optional[requests.Response]:
        target = f"{kind.value}/{name}"
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise TransientAPIError(f"{method} {target} timed out after {self.timeout}s: {e}")
        except requests.exceptions.ConnectionError as e:
            raise TransientAPIError(f"{method} {target} could not connect to {self.endpoint}: {e}")
        except requests.exceptions.RequestException as e:
            raise ClusterAPIError(f"{method} {target} failed: {e}")

        if response.status_code == 404 and allow_not_found:
            return None

        if response.status_code in RETRYABLE_STATUS:
            raise TransientAPIError(f"{method} {target} returned {response.status_code}")

        if response.status_code >= 400:
            # Response bodies may echo Secret values back.
            if kind == ResourceKind.SECRET or not response.text:
                detail = response.reason
            else:
                detail = response.text[:200]
            logger.debug(f"{method} {target} rejected: {response.status_code}")
            raise ClusterAPIError(f"{method} {target} returned {response.status_code}: {detail}")

        return response
