"""Provider system exceptions."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for all provider-related errors."""


class ProviderLoadError(ProviderError):
    """Raised when a provider module fails to import or does not match the protocol."""


class ProviderNotFoundError(ProviderError):
    """Raised when a provider id is not known to the registry."""


class DuplicateProviderError(ProviderError):
    """Raised when two providers (or two base URL rules) share the same id."""


class OperationAborted(Exception):
    """Raised when an ``AbortSignal`` fires while a request is pending.

    Not a ``ProviderError``: an abort means the caller no longer wants
    the result, it is never logged as a failure or retried.
    """
