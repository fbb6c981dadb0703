"""Order and carpet item models."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Float, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from rugtrack.database import Base


class ApprovalStatus(str, enum.Enum):
    """Client approval status of an order."""
    NOT_NEEDED = "not_needed"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ItemStatus(str, enum.Enum):
    """Workflow status of a single rug."""
    PENDING = "pending"
    MEASURED = "measured"
    REPAIR_NEEDED = "repair_needed"
    REPAIR_ESTIMATED = "repair_estimated"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"


class Material(str, enum.Enum):
    """Rug material, drives the cleaning rate."""
    SYNTHETIC = "Synthetic"
    WOOL = "Wool"
    SILK = "Silk"
    COTTON = "Cotton"
    BLEND = "Blend"
    UNKNOWN = "Unknown"


class Condition(str, enum.Enum):
    """Rug condition as recorded at measurement."""
    GOOD = "Good"
    STAINED = "Stained"
    WORN = "Worn"
    DAMAGED = "Damaged"
    HEAVILY_SOILED = "Heavily Soiled"


class Order(Base):
    """Order model - one client drop-off with its rugs."""
    __tablename__ = "orders"
    
    id = Column(String(20), primary_key=True, index=True)
    client_name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(200), nullable=True)
    address = Column(Text, nullable=True)
    signature = Column(Text, nullable=False)  # Encoded signature image, stored as-is
    receipt = Column(String(255), nullable=True)  # Filename only
    requires_approval = Column(Boolean, default=False, nullable=False)
    approval_status = Column(String(20), default=ApprovalStatus.NOT_NEEDED.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relationships
    items = relationship(
        "CarpetItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="CarpetItem.position",
    )


class CarpetItem(Base):
    """Carpet item model - a rug inside an order, identified by (order_id, id)."""
    __tablename__ = "carpet_items"
    
    order_id = Column(String(20), ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True)
    id = Column(String(20), primary_key=True)
    position = Column(Integer, default=0, nullable=False)  # Intake order within the parent
    status = Column(String(30), default=ItemStatus.PENDING.value, nullable=False)
    length = Column(String(50), nullable=True)  # Entered as text, parsed for pricing
    width = Column(String(50), nullable=True)
    material = Column(String(20), nullable=True)
    state = Column(String(30), nullable=True)
    photo = Column(String(255), nullable=True)
    cleaning_cost = Column(Float, default=0, nullable=False)
    repair_cost = Column(Float, nullable=True, default=None)
    repair_description = Column(Text, nullable=True)
    
    # Relationships
    order = relationship("Order", back_populates="items")
