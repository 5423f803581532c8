"""
Configuration Settings for the Niche Growth Dashboard

This module centralizes all configuration settings for the dashboard,
including environment variables, API keys, and application constants.
Validation lives in config.validators.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# =============================================================================
# Reasoning Provider (LLM) Settings
# =============================================================================

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").lower()   # gemini | anthropic

GOOGLE_AI_API_KEY = os.getenv("GOOGLE_AI_API_KEY")
DEFAULT_AI_MODELS = [
    'gemini-2.0-flash',          # Good balance of capability and cost
    'gemini-2.5-flash',
    'gemini-2.0-flash-lite',     # Cheaper fallback
    'gemini-2.5-flash-lite'
]

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")

AI_REQUEST_TIMEOUT = int(os.getenv("AI_REQUEST_TIMEOUT", "60"))   # Seconds per LLM call

ANALYSIS_MAX_TOKENS = 1024
INSIGHTS_MAX_TOKENS = 2048
GENERATION_MAX_TOKENS = 2048

# =============================================================================
# Content Provider (Social Statistics API) Settings
# =============================================================================

RAPIDAPI_KEY = os.getenv("RAPIDAPI_KEY")
STATISTICS_API_HOST = os.getenv("STATISTICS_API_HOST", "instagram-statistics-api.p.rapidapi.com")
CONTENT_API_TIMEOUT = int(os.getenv("CONTENT_API_TIMEOUT", "15"))  # Seconds per HTTP call

SUPPORTED_PLATFORMS = ["instagram", "tiktok"]
DEFAULT_PLATFORMS = ["instagram"]

CREATOR_SEARCH_LIMIT = 20        # Creators requested per platform search
CREATOR_SEARCH_SORT = "-avgER"   # Descending average engagement rate
MAX_POSTS_PER_CREATOR = 12       # Posts kept per ingestion
POST_LOOKBACK_DAYS = 90          # Trailing window for the posts endpoint

# Fixture data served when the provider fails or returns nothing
MOCK_CREATOR_COUNT = 10
MOCK_POST_COUNT = 8
MOCK_DATA_SEED = int(os.environ["MOCK_DATA_SEED"]) if os.getenv("MOCK_DATA_SEED") else None

# =============================================================================
# Analysis Pipeline Settings
# =============================================================================

ANALYSIS_BATCH_SIZE = 10                 # Unanalyzed posts per analysis run
INSIGHT_SAMPLE_LIMIT = 50                # Analyzed posts sent for insight generation
MIN_ANALYZED_POSTS_FOR_INSIGHTS = 3      # Hard business rule
INSIGHT_CAPTION_PREVIEW_LENGTH = 100     # Caption characters per post summary line

# =============================================================================
# Post Generation Settings
# =============================================================================

GENERATION_INSIGHT_LIMIT = 10            # Most recent insights fed to the generator
MAX_HASHTAGS = 15
GENERATED_POST_HISTORY_LIMIT = 20
CREATOR_TOP_POSTS_LIMIT = 5              # Posts shown per tracked creator

# =============================================================================
# Database Settings
# =============================================================================

DB_SERVER = os.getenv("server", "")
DB_NAME = os.getenv("db", "")
DB_USER = os.getenv("user", "")
DB_PASSWORD = os.getenv("pwd", "")

# Build connection string safely (validation happens in validate_settings())
DB_CONNECTION_STRING = (
    f"DRIVER={{ODBC Driver 18 for SQL Server}}; "
    f"SERVER={DB_SERVER}; "
    f"DATABASE={DB_NAME}; "
    f"UID={DB_USER}; "
    f"PWD={DB_PASSWORD}; "
    f"TrustServerCertificate=yes; MARS_Connection=yes;"
) if all([DB_SERVER, DB_NAME, DB_USER, DB_PASSWORD]) else ""

SCHEMA_FILE = os.path.join(APP_ROOT, "data", "schema.sql")

# =============================================================================
# Logging
# =============================================================================

LOG_FILE = os.getenv("LOG_FILE", os.path.join(APP_ROOT, "growth_dashboard.log"))
