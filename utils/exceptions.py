"""
Custom Exception Classes for the Niche Growth Dashboard

This module defines custom exceptions for better error handling and
categorization of failures across the application. Precondition messages
are shown to users verbatim, so their text should stay stable.
"""


class GrowthDashboardError(Exception):
    """Base exception for all Niche Growth Dashboard errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(GrowthDashboardError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Content Provider Errors
# =============================================================================

class ContentProviderError(GrowthDashboardError):
    """Raised when the social statistics API cannot be reached or returns garbage."""
    pass


# =============================================================================
# Reasoning Service Errors
# =============================================================================

class ReasoningServiceError(GrowthDashboardError):
    """Base exception for LLM provider errors (unavailable, timeout, bad status)."""
    pass


class ResponseParseError(ReasoningServiceError):
    """Raised when a provider response holds no usable JSON.

    Attributes:
        operation: Which flow failed ('analysis', 'insights' or 'generation').
    """

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Failed to parse {operation} response")


# =============================================================================
# Precondition Errors
# =============================================================================

class PreconditionError(GrowthDashboardError):
    """Raised before any external call when an operation's inputs are not usable."""
    pass


class NoNicheError(PreconditionError):
    """Raised when the user has not picked a niche yet."""

    def __init__(self, message: str = "User has no niche set"):
        super().__init__(message)


class InsufficientDataError(PreconditionError):
    """Raised when too few analyzed posts exist to generate insights."""

    def __init__(self, message: str = "Need at least 3 analyzed posts to generate insights"):
        super().__init__(message)


class MissingInsightsError(PreconditionError):
    """Raised when post generation is requested without any insights."""

    def __init__(self, message: str = "No insights available. Generate insights first by analyzing posts."):
        super().__init__(message)


class MissingPlatformError(PreconditionError):
    """Raised when post generation is requested without a platform."""

    def __init__(self, message: str = "Platform is required"):
        super().__init__(message)


class InvalidInputError(PreconditionError):
    """Raised when caller input is present but not acceptable."""
    pass


# =============================================================================
# Lookup Errors
# =============================================================================

class MissingIdentifierError(GrowthDashboardError):
    """Raised when an operation needs an id and none was supplied."""

    def __init__(self, message: str = "Missing id"):
        super().__init__(message)


class NotFoundError(GrowthDashboardError):
    """Raised when a referenced record does not exist."""
    pass


# =============================================================================
# Database Errors
# =============================================================================

class DatabaseError(GrowthDashboardError):
    """Base exception for database-related errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when database connection fails."""
    pass


class QueryError(DatabaseError):
    """Raised when a database query fails."""
    pass
