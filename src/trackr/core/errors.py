# src/trackr/core/errors.py

from __future__ import annotations


class TrackrError(Exception):
    """Base class for errors raised by trackr."""


class InvalidArgument(TrackrError, ValueError):
    """User input rejected before anything was persisted."""


class PersistenceFailure(TrackrError, RuntimeError):
    """A repository read or write failed."""
