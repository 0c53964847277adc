# fleetstore/Core/errors.py

"""
Domain Errors

Exceptions raised by repositories and services.

Taxonomy:
- NotFound: a referenced Account, Device or DeviceGroup does not exist
  where the operation requires it.
- StoreUnavailable: the database could not execute a query or delete
  (connectivity, SQL execution failure). Never retried automatically.

Invalid arguments (blank ids, inverted time ranges, cutoffs below 1) are
not errors: they produce empty or zero results. An uncountable range is
not an error either; see fleetstore.Core.record_count.RecordCount.
"""


class FleetStoreError(Exception):
    """Base class for all event store errors."""


class NotFound(FleetStoreError):
    """
    Raised when an Account, Device or DeviceGroup is required but missing.

    Example:
        raise NotFound("Device", "acme/truck-01")
    """

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class StoreUnavailable(FleetStoreError):
    """
    Raised when the underlying database fails to execute an operation.

    The original SQLAlchemy exception is chained as __cause__.
    """

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        message = f"Store unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
