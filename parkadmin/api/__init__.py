"""
API routes initialization.

This module aggregates all API routers and provides a single router
to include in the main application.
"""

from fastapi import APIRouter

from parkadmin.api.routes import auth, categories, highlights, press_releases, subscribers, users

# Create main API router
api_router = APIRouter()

# Include authentication routes
api_router.include_router(auth.router)

# Include content routes
api_router.include_router(highlights.router)
api_router.include_router(press_releases.router)
api_router.include_router(categories.router)
api_router.include_router(subscribers.router)

# Include user management routes
api_router.include_router(users.router)
