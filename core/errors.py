from __future__ import annotations


class DashboardError(Exception):
    """Base class for recoverable dashboard failures."""


class FetchError(DashboardError):
    """The CSV export could not be retrieved."""


NetworkError = FetchError


class ParseError(DashboardError):
    """The CSV document could not be parsed at all."""


class EmptyResultError(DashboardError):
    """The fetch succeeded but produced no records."""
