"""Abstract base class for cluster API clients."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from ..ingest.models import ObservedState, ResourceKind


class ClusterAPI(ABC):
    """
    Narrow interface to the external orchestrator.

    The reconciler is the only caller that mutates through this interface.
    Implementations raise:
    - TransientAPIError for network errors, timeouts and retryable responses
    - ClusterAPIError for every other rejected call
    """

    @abstractmethod
    def get(self, kind: ResourceKind, name: str) -> Optional[ObservedState]:
        """
        Fetch live state of a resource.

        Returns:
            ObservedState, or None when the resource does not exist
        """
        pass

    @abstractmethod
    def create(self, kind: ResourceKind, name: str, spec: Dict[str, Any]) -> None:
        """Create a resource from its desired body."""
        pass

    @abstractmethod
    def update(self, kind: ResourceKind, name: str, spec: Dict[str, Any]) -> None:
        """Replace the managed fields of an existing resource."""
        pass

    @abstractmethod
    def delete(self, kind: ResourceKind, name: str) -> None:
        """Delete a resource."""
        pass

    def close(self) -> None:
        """Release connections held by the client."""
        pass
