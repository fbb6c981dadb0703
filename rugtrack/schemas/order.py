"""Order and carpet item schemas."""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field

from rugtrack.models.order import ApprovalStatus, ItemStatus, Material, Condition


class ClientDecision(str, Enum):
    """Answers a client can give on the approval page."""
    APPROVED = "approved"
    REJECTED = "rejected"


class ItemCreate(BaseModel):
    """Schema for a rug recorded at intake."""
    id: str = Field(..., min_length=1, max_length=20)
    length: Optional[str] = Field(None, max_length=50)
    width: Optional[str] = Field(None, max_length=50)
    material: Optional[Material] = None
    state: Optional[Condition] = None
    photo: Optional[str] = Field(None, max_length=255)

    class Config:
        extra = "forbid"


class ItemUpdate(BaseModel):
    """Fields operations staff may change on a rug."""
    status: Optional[ItemStatus] = None
    length: Optional[str] = Field(None, max_length=50)
    width: Optional[str] = Field(None, max_length=50)
    material: Optional[Material] = None
    state: Optional[Condition] = None
    photo: Optional[str] = Field(None, max_length=255)

    class Config:
        extra = "forbid"


class RepairEstimate(BaseModel):
    """Schema for creating or editing a repair estimate."""
    repair_cost: float = Field(..., ge=0)
    repair_description: str = Field(..., min_length=1)

    class Config:
        extra = "forbid"


class ItemResponse(BaseModel):
    """Response schema for a rug."""
    id: str
    order_id: str
    status: str
    length: Optional[str] = None
    width: Optional[str] = None
    material: Optional[str] = None
    state: Optional[str] = None
    photo: Optional[str] = None
    cleaning_cost: float = 0
    repair_cost: Optional[float] = None
    repair_description: Optional[str] = None

    class Config:
        from_attributes = True


class OrderCreate(BaseModel):
    """Schema for intake of a new order.

    ``id`` and ``items`` are checked by the handler so that a missing value
    is reported as a plain 400 rather than a schema error.
    """
    id: Optional[str] = Field(None, max_length=20)
    client_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    signature: str = Field(..., min_length=1)
    receipt: Optional[str] = Field(None, max_length=255)
    items: Optional[List[ItemCreate]] = None

    class Config:
        extra = "forbid"


class OrderUpdate(BaseModel):
    """Fields operations staff may change on an order."""
    client_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    receipt: Optional[str] = Field(None, max_length=255)
    requires_approval: Optional[bool] = None
    approval_status: Optional[ApprovalStatus] = None

    class Config:
        extra = "forbid"


class ApprovalDecision(BaseModel):
    """The client's answer to an estimate."""
    decision: ClientDecision

    class Config:
        extra = "forbid"


class OrderResponse(BaseModel):
    """Response schema for orders, with totals derived from the rugs."""
    id: str
    client_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    signature: str
    receipt: Optional[str] = None
    requires_approval: bool
    approval_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[ItemResponse] = []
    cleaning_total: float = 0
    repair_total: float = 0
    grand_total: float = 0

    class Config:
        from_attributes = True


class NextOrderId(BaseModel):
    """Next free order id."""
    next_id: str


class RepairQueueItem(ItemResponse):
    """A rug on the repair team's queue."""
    client_name: str
    has_estimate: bool = False


class PurgeResult(BaseModel):
    """Counts removed by a full purge."""
    items_deleted: int
    orders_deleted: int
