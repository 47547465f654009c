"""
Error taxonomy for the discovery engine.

ValidationError and ConflictError are terminal for the caller and never retried.
TransientStoreError marks a storage/network failure; reads degrade to empty
results, writes propagate it. Every error is scoped to a single request.
"""


class DiscoveryError(Exception):
    """Base class for all engine errors. `code` is the stable machine-readable name."""

    code = "discovery_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DiscoveryError):
    """Malformed filter, pagination, breakdown, or request input."""

    code = "validation_error"


class NotFoundError(DiscoveryError):
    """Unknown content item, request, or response id."""

    code = "not_found"


class ConflictError(DiscoveryError):
    """Illegal state transition (e.g. awarding an already refunded bounty)."""

    code = "conflict"


class PermissionDeniedError(DiscoveryError):
    """Viewer is not allowed to perform the transition (e.g. closing someone else's request)."""

    code = "permission_denied"


class TransientStoreError(DiscoveryError):
    """Storage or network failure during a read or write."""

    code = "transient_store_error"
