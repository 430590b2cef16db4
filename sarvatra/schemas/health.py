"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    store: Literal["sql", "memory"] = Field(description="Configured persistence backend")
    database: Literal["connected", "disconnected"] = Field(
        description="Store reachability at the time of the check",
    )
