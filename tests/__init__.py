# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the MindPath API:
# - test_api.py: Welcome route, 404s, error handlers, request logging
# - test_rate_limit.py: Client keys, fixed window, draft-8 headers, 429s
# - test_cors_and_static.py: CORS preflight and static file serving
# - test_bootstrap.py: Uploads directory bootstrap
# - test_mongo_client.py: MongoDB connection wrapper (fake client)
# - test_health.py: Liveness and readiness
# - test_config.py: Settings loading
# - test_start_server.py: uvicorn entry point
#
# Run tests with: pytest
# =============================================================================
