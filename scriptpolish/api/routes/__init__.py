"""API Route modules"""

from scriptpolish.api.routes.corrections import router as corrections_router
from scriptpolish.api.routes.polish import router as polish_router
from scriptpolish.api.routes.voice import router as voice_router

__all__ = [
    "corrections_router",
    "polish_router",
    "voice_router",
]
