"""
Configuration for the budget reconciliation service.
"""

# Load environment variables FIRST
from dotenv import load_dotenv
load_dotenv()

import os
from typing import Optional, Tuple


def _split_env_list(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


class Config:
    """Base configuration."""

    # Data source
    DATA_SOURCE_PATH: str = os.getenv(
        "DATA_SOURCE_PATH",
        os.path.join(os.path.dirname(__file__), "data", "snapshot.json"),
    )

    # Selection rules for the reconciliation
    REPORTABLE_ESTIMATE_STATUS: str = "Approved"  # case-sensitive
    QUALIFYING_PO_STATUSES: Tuple[str, ...] = _split_env_list(
        os.getenv("QUALIFYING_PO_STATUSES", "Approved,Partially_Received,Completed")
    )
    ESTIMATE_IMPORT_MODE: str = "IMPORT_ITEMS_FROM_ESTIMATE"

    # Display defaults
    NOT_AVAILABLE: str = "N/A"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE", "budget_reconciliation.log")

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"

    # Workflow Configuration
    GRAPH_RECURSION_LIMIT: int = 25

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.LOG_LEVEL.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Invalid LOG_LEVEL: {cls.LOG_LEVEL}")

        if not cls.QUALIFYING_PO_STATUSES:
            raise ValueError("QUALIFYING_PO_STATUSES must name at least one status")


class DevelopmentConfig(Config):
    """Development configuration."""
    LOG_LEVEL = "DEBUG"
    API_DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    LOG_LEVEL = "INFO"
    API_DEBUG = False


class TestConfig(Config):
    """Test configuration."""
    LOG_LEVEL = "DEBUG"
    LOG_FILE = None


def get_config(env: str = None) -> Config:
    """Get configuration based on environment."""
    if env is None:
        env = os.getenv("ENV", "development").lower()

    if env == "production":
        config = ProductionConfig()
    elif env == "test":
        config = TestConfig()
    else:
        config = DevelopmentConfig()

    # Validate configuration on creation
    config.validate()
    return config
