"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at WageMapError so callers can catch broadly
(except WageMapError) or narrowly (except WageDataError).

Not every failure is an exception.  These conditions are ordinary outcomes
and never raise:
  unmapped state code   → region left out of the location index
  region key not found  → Classification(has_data=False)
  superseded fetch      → FetchOutcome.STALE
"""
from __future__ import annotations


class WageMapError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(WageMapError):
    """Raised when required configuration is missing or invalid."""


class DataSourceError(WageMapError):
    """Raised when the region collection or occupation directory cannot be loaded."""


class WageDataError(DataSourceError):
    """Raised when a wage-threshold table fetch fails or returns invalid JSON."""


class InvalidSalaryError(WageMapError):
    """Raised when salary text cannot be parsed into a finite number."""
