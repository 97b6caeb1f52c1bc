# API Routes Module
from app.api.routes import (
    dashboard,
    sessions,
    subscriptions,
)

__all__ = [
    "dashboard",
    "sessions",
    "subscriptions",
]
