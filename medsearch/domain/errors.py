# medsearch/domain/errors.py
from __future__ import annotations


class MedSearchError(Exception):
    """Base class for errors raised by the catalog/search core."""


class QueryValidationError(MedSearchError):
    """A search parameter is malformed; `field` names the first offender."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class StoreUnavailable(MedSearchError):
    """The document store failed; transient, never cached or retried here."""


class TextSearchUnsupported(MedSearchError):
    """The store refused a full-text query (no text index, or disabled)."""


class MedicineNotFound(MedSearchError):
    def __init__(self, key: str):
        super().__init__(f"Medicine not found: {key}")
        self.key = key
