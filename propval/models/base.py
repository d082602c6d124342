from typing import Protocol
from ..data.base import PropertyRecord, ValuationRecord

class InvalidInput(ValueError):
    """Raised when a property record cannot be priced (e.g. land size <= 0)."""

class AIResponseError(RuntimeError):
    """The AI path failed: SDK/network error, empty reply or unusable JSON."""

class ValuationModel(Protocol):
    def valuate(self, property: PropertyRecord) -> ValuationRecord:
        """
        Returns a ValuationRecord for the given property.
        """
        ...
