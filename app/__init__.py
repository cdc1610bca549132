# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, middleware order, error handlers
# - config.py: Environment variable loading and settings
# - middleware.py: Static files, request logging, rate limiting
# - exceptions.py: Application error and global 500 handlers
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# connection management and limiting to the lib/ package.
# =============================================================================
