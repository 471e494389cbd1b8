"""
Product admin exceptions.

Raised by the draft rules, the stores and the uploaders. Routes translate
them into JSON error responses; the form controller turns them into
user-visible messages.
"""


class ProductAdminError(Exception):
    """Base class for every error raised by the product admin module."""


class ValidationError(ProductAdminError):
    """One or more fields failed validation.

    ``errors`` maps a field name to its message.
    """

    def __init__(self, errors, message=None):
        if isinstance(errors, str):
            errors = {'__all__': errors}
        self.errors = dict(errors)
        super().__init__(message or '; '.join(f"{k}: {v}" for k, v in self.errors.items()))


class UploadError(ProductAdminError):
    """A single file could not be stored (type, size or transport)."""


class StoreError(ProductAdminError):
    """Create/update against the record store failed."""


class NotFoundError(StoreError):
    """No product with the given slug or id."""


class ConflictError(StoreError):
    """Another product already uses this slug."""
