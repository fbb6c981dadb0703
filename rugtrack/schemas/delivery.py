"""Delivery schemas."""
from typing import Optional, List
from pydantic import BaseModel, Field


class RouteRequest(BaseModel):
    """Orders selected for one delivery run."""
    order_ids: List[str] = Field(..., min_length=2)


class RouteStop(BaseModel):
    """One stop of a planned delivery run."""
    stop: int
    order_id: str
    client_name: str
    address: Optional[str] = None
    ready_items: int = 0


class RouteResponse(BaseModel):
    """Planned delivery run."""
    stops: List[RouteStop] = []
