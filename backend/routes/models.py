"""Pydantic request/response models for API endpoints."""

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None


class ActionBody(BaseModel):
    action: str
