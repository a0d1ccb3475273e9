"""
API routers package.
"""

from api.routers.agent import router as agent_router

__all__ = ["agent_router"]
