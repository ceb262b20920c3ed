from __future__ import annotations


class FireScanError(Exception):
    """Base class for errors raised by the viewer."""


class ConfigError(FireScanError):
    """The configuration file is unreadable, malformed or invalid."""


class TemplateError(FireScanError):
    """Templates failed to compile at startup or to render for a request."""


class QueryError(FireScanError):
    """A count or fetch against Firestore failed."""


class ClientInitError(FireScanError):
    """The Firestore client could not be constructed."""
