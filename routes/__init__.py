# Routes package __init__.py - re-exports routers for main.py convenience
from .cards import router as cards_router
from .sessions import router as sessions_router
from .stats import router as stats_router

__all__ = ['cards_router', 'sessions_router', 'stats_router']
