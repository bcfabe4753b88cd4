"""Custom exception classes for kapply."""

from typing import List, Optional


class KapplyError(Exception):
    """Base exception for all kapply errors."""
    pass


class DeclarationLoadError(KapplyError):
    """Raised when a declaration file cannot be read or decoded."""
    pass


class MalformedSpecError(KapplyError):
    """Raised when a declaration is missing a required field or has invalid data."""
    pass


class DuplicateNameError(KapplyError):
    """Raised when two declarations share a name."""

    def __init__(self, name: str, first_kind: str, second_kind: str):
        self.name = name
        super().__init__(
            f"Duplicate resource name '{name}' (declared as {first_kind} and again as {second_kind})"
        )


class GraphConstructionError(KapplyError):
    """Raised when the dependency graph cannot be built."""
    pass


class UnresolvedReferenceError(GraphConstructionError):
    """Raised when a reference points at a resource or key that is not declared."""

    def __init__(self, source: str, target: str, key: Optional[str] = None, detail: str = "resource not declared"):
        self.source = source
        self.target = target
        self.key = key
        ref = f"{target}.{key}" if key else target
        super().__init__(f"Resource '{source}' references '{ref}': {detail}")


class CyclicDependencyError(GraphConstructionError):
    """Raised when references form a cycle."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Cyclic dependency: {' -> '.join(cycle)}")


class ClusterAPIError(KapplyError):
    """Raised when the cluster API rejects a call."""
    pass


class TransientAPIError(ClusterAPIError):
    """Raised for network errors, timeouts and retryable server responses."""
    pass


class OutcomeConflictError(KapplyError):
    """Raised when an outcome slot is written twice."""
    pass


class ConfigError(KapplyError):
    """Raised when configuration is invalid or missing."""
    pass
