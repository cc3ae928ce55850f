"""Greeting, health, config and placeholder image endpoints."""

import platform

from fastapi import APIRouter, Depends, Response

from backend.config import GatewayConfig

from .deps import get_config
from .models import ApiResponse

router = APIRouter()

_PLACEHOLDER_SVG = """\
<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">
    <rect width="100%" height="100%" fill="#1a1a1a"/>
    <text x="50%" y="50%" font-family="Arial" font-size="24" fill="#666" text-anchor="middle" dy=".3em">
        {width}x{height}
    </text>
</svg>"""


@router.get("/")
async def root():
    """Plain-text greeting."""
    return Response(f"Adventure Gateway: Hello, Python {platform.python_version()}!", media_type="text/plain")


@router.get("/health")
async def health():
    """Health check."""
    return ApiResponse(success=True, data="Server is running")


@router.get("/config")
async def show_config(config: GatewayConfig = Depends(get_config)):
    """Model and backend the gateway is configured with."""
    return ApiResponse(
        success=True,
        data={"ollamaModel": config.ollama_model, "ollamaUrl": config.ollama_url},
    )


def _dimension(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


@router.get("/placeholder/{width}/{height}")
async def placeholder(width: str, height: str):
    """SVG placeholder image; non-numeric sizes fall back to 400x300."""
    svg = _PLACEHOLDER_SVG.format(width=_dimension(width, 400), height=_dimension(height, 300))
    return Response(svg, media_type="image/svg+xml")
