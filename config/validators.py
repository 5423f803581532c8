"""
Configuration Validation for the Niche Growth Dashboard

This module contains configuration validation logic.
Extracted from settings.py for better separation of concerns.
"""

from utils.exceptions import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)


def validate_settings(require_database: bool = True):
    """
    Validate that all required settings are properly configured.

    Args:
        require_database: Whether SQL Server credentials are mandatory.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    # Reasoning provider credentials
    if settings.LLM_PROVIDER == "gemini":
        if not settings.GOOGLE_AI_API_KEY:
            errors.append("Missing required environment variable: GOOGLE_AI_API_KEY")
    elif settings.LLM_PROVIDER == "anthropic":
        if not settings.ANTHROPIC_API_KEY:
            errors.append("Missing required environment variable: ANTHROPIC_API_KEY")
    else:
        errors.append(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER!r} (expected 'gemini' or 'anthropic')")

    # The content provider degrades to fixture data, so a missing key is only a warning
    if not settings.RAPIDAPI_KEY:
        logger.warning("RAPIDAPI_KEY is not set. Creator discovery and post ingestion "
                       "will serve fixture data only.")

    if require_database:
        required_vars = [
            ("DB_SERVER", settings.DB_SERVER),
            ("DB_NAME", settings.DB_NAME),
            ("DB_USER", settings.DB_USER),
            ("DB_PASSWORD", settings.DB_PASSWORD)
        ]

        for var_name, var_value in required_vars:
            if not var_value:
                errors.append(f"Missing required environment variable: {var_name}")

        if not settings.DB_CONNECTION_STRING:
            errors.append("Database connection string could not be built. Check DB_SERVER, DB_NAME, DB_USER, DB_PASSWORD.")

    # Platforms
    unknown_platforms = [p for p in settings.DEFAULT_PLATFORMS if p not in settings.SUPPORTED_PLATFORMS]
    if unknown_platforms:
        errors.append(f"DEFAULT_PLATFORMS contains unsupported platforms: {', '.join(unknown_platforms)}")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("ANALYSIS_BATCH_SIZE", settings.ANALYSIS_BATCH_SIZE, 1, 50),
        ("INSIGHT_SAMPLE_LIMIT", settings.INSIGHT_SAMPLE_LIMIT, 1, 50),
        ("MIN_ANALYZED_POSTS_FOR_INSIGHTS", settings.MIN_ANALYZED_POSTS_FOR_INSIGHTS, 1, 50),
        ("CREATOR_SEARCH_LIMIT", settings.CREATOR_SEARCH_LIMIT, 1, 100),
        ("MAX_POSTS_PER_CREATOR", settings.MAX_POSTS_PER_CREATOR, 1, 100),
        ("POST_LOOKBACK_DAYS", settings.POST_LOOKBACK_DAYS, 1, 365),
        ("MAX_HASHTAGS", settings.MAX_HASHTAGS, 0, 30),
        ("GENERATION_INSIGHT_LIMIT", settings.GENERATION_INSIGHT_LIMIT, 1, 50),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    if settings.INSIGHT_SAMPLE_LIMIT < settings.MIN_ANALYZED_POSTS_FOR_INSIGHTS:
        errors.append("INSIGHT_SAMPLE_LIMIT must not be smaller than MIN_ANALYZED_POSTS_FOR_INSIGHTS")

    # Validate timeout values are positive
    timeout_settings = [
        ("AI_REQUEST_TIMEOUT", settings.AI_REQUEST_TIMEOUT),
        ("CONTENT_API_TIMEOUT", settings.CONTENT_API_TIMEOUT),
    ]

    for name, value in timeout_settings:
        if value <= 0:
            errors.append(f"{name} must be positive, got {value}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "reasoning_provider": {
            "provider": settings.LLM_PROVIDER,
            "configured": bool(settings.GOOGLE_AI_API_KEY if settings.LLM_PROVIDER == "gemini"
                               else settings.ANTHROPIC_API_KEY),
            "timeout_seconds": settings.AI_REQUEST_TIMEOUT,
        },
        "content_provider": {
            "host": settings.STATISTICS_API_HOST,
            "configured": bool(settings.RAPIDAPI_KEY),
            "timeout_seconds": settings.CONTENT_API_TIMEOUT,
            "platforms": settings.SUPPORTED_PLATFORMS,
        },
        "database": {
            "server": settings.DB_SERVER[:20] + "..." if settings.DB_SERVER and len(settings.DB_SERVER) > 20 else settings.DB_SERVER,
            "database": settings.DB_NAME,
        },
        "pipeline": {
            "analysis_batch_size": settings.ANALYSIS_BATCH_SIZE,
            "insight_sample_limit": settings.INSIGHT_SAMPLE_LIMIT,
            "min_analyzed_posts": settings.MIN_ANALYZED_POSTS_FOR_INSIGHTS,
            "mock_data_seed": settings.MOCK_DATA_SEED,
        }
    }
