# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - root.py: Welcome endpoint (GET /)
# - health.py: Liveness and readiness checks
#
# Each router is mounted in main.py.
# =============================================================================

from . import health
from . import root

__all__ = [
    "health",
    "root",
]
