"""
Module: exceptions
Purpose: Custom exception hierarchy for astrofold.
"""


class AstrofoldError(Exception):
    """Base exception for astrofold."""

    pass


class ScanError(AstrofoldError):
    pass


class RootNotFoundError(ScanError):
    pass


class ConfigurationError(AstrofoldError):
    pass


class LookupTableError(ConfigurationError):
    pass


class HashingError(AstrofoldError):
    pass


class NormalizationError(AstrofoldError):
    pass
