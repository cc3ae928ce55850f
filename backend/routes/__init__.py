"""FastAPI endpoints.

Endpoint groups: session settings + one-shot generation (adventure),
Server-Sent Events streams (streaming), and greeting/health/config/placeholder
(misc). The backend client and session store are app-owned and reach the
handlers through the dependencies in deps.py.
"""

from fastapi import APIRouter

from .adventure import router as adventure_router
from .misc import router as misc_router
from .streaming import router as streaming_router

router = APIRouter()
router.include_router(misc_router)
router.include_router(adventure_router)
router.include_router(streaming_router)
