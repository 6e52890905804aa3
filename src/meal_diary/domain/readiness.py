"""Store readiness model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreReadiness:
    """Result of probing the persistence layer at startup."""

    ready: bool
    detail: str | None = None
