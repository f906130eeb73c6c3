"""
Core utilities and configuration for the Phoenix environmental ETL.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factory
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import create_session_factory
    from core.exceptions import CatalogUnavailable, UpstreamUnavailable
    from core.logging import setup_logging

Example:
    setup_logging()
    engine, session_factory = create_session_factory()

    async with session_factory() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "create_session_factory",
    "setup_logging",
    # Exceptions
    "ETLException",
    "CatalogUnavailable",
    "RunInProgressError",
    "UpstreamError",
    "UpstreamUnavailable",
    "MalformedUpstreamResponse",
    "TransformationError",
    "ValidationError",
    "DataFormatError",
    "LoadError",
    "UpsertError",
]
