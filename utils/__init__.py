# utils/__init__.py
"""
Shared Utilities Package for the Community Admin Console

This package contains common utilities shared across all pages:
- config: Configuration management (local + Streamlit Cloud)
- db: Database connection management with pooling
- event_analytics: Reporting engine, data access and dashboard fragments

Usage:
    from utils.db import get_db_engine, execute_update
    from utils.config import config

    # Or import commonly used items directly
    from utils import get_db_engine, config
"""

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    APP_CONFIG,
)

# Database
from .db import (
    get_db_engine,
    check_db_connection,
    get_connection,
    execute_update,
    get_connection_pool_status,
)

__all__ = [
    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'APP_CONFIG',

    # Database
    'get_db_engine',
    'check_db_connection',
    'get_connection',
    'execute_update',
    'get_connection_pool_status',
]

__version__ = '1.0.0'
