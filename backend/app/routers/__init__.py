from app.routers import health, submissions

__all__ = [
    "health",
    "submissions",
]
