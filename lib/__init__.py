# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - bootstrap.py: Startup filesystem preparation (uploads directory)
# - mongo_client.py: Process-lifetime MongoDB connection wrapper
# - rate_limit.py: Fixed-window rate limiting and draft-8 headers
# - utils.py: Shared utilities (base application error)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.bootstrap import ensure_directory
from lib.mongo_client import MongoConnectionError, MongoDatabase
from lib.rate_limit import FixedWindowLimiter, RateLimitResult, client_ip, client_key
from lib.utils import ApplicationError

__all__ = [
    # Bootstrap
    "ensure_directory",
    # MongoDB
    "MongoDatabase",
    "MongoConnectionError",
    # Rate limiting
    "FixedWindowLimiter",
    "RateLimitResult",
    "client_ip",
    "client_key",
    # Utils
    "ApplicationError",
]
