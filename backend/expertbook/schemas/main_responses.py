"""Response models for application-level endpoints."""

from .base import StandardizedModel


class HealthResponse(StandardizedModel):
    status: str
    service: str
    environment: str
    timestamp: str
