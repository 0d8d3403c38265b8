"""
API route modules.

Import all route modules here for easy access.
"""

from parkadmin.api.routes import auth, categories, highlights, press_releases, subscribers, users

__all__ = ["auth", "categories", "highlights", "press_releases", "subscribers", "users"]
