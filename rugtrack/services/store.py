"""Persistence helpers for orders and their rugs."""
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from rugtrack.models.order import Order, CarpetItem, ApprovalStatus, ItemStatus

logger = logging.getLogger(__name__)


def create_order(db: Session, data: Dict, items: List[Dict]) -> Order:
    """
    Create an order with its rugs in a single commit.

    If anything fails the session is rolled back and neither the order nor
    any of its rugs is stored.
    """
    order = Order(
        requires_approval=False,
        approval_status=ApprovalStatus.NOT_NEEDED.value,
    )
    for field, value in data.items():
        setattr(order, field, value)
    for position, item_data in enumerate(items):
        item = CarpetItem(position=position, status=ItemStatus.PENDING.value, cleaning_cost=0)
        for field, value in item_data.items():
            if value is not None:
                setattr(item, field, value)
        order.items.append(item)

    db.add(order)
    commit(db, order)
    return order


def get_order(db: Session, order_id: str) -> Optional[Order]:
    """Get an order with its rugs, or None."""
    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.id == order_id)
        .first()
    )


def list_orders(db: Session) -> List[Order]:
    """All orders, newest first."""
    return (
        db.query(Order)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def list_order_ids(db: Session) -> List[str]:
    return [row[0] for row in db.query(Order.id).all()]


def get_item(db: Session, order_id: str, item_id: str) -> Optional[CarpetItem]:
    """Get a rug by its (order, item) identity."""
    return (
        db.query(CarpetItem)
        .filter(CarpetItem.order_id == order_id, CarpetItem.id == item_id)
        .first()
    )


def apply_changes(record, changes: Dict) -> None:
    """Patch only the supplied fields; the session is not committed."""
    for field, value in changes.items():
        setattr(record, field, value)


def commit(db: Session, *records) -> None:
    """Commit pending changes, rolling back on failure, then reload ``records``."""
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    for record in records:
        db.refresh(record)


def update_order(db: Session, order: Order, changes: Dict) -> Order:
    apply_changes(order, changes)
    commit(db, order)
    return order


def update_item(db: Session, item: CarpetItem, changes: Dict) -> CarpetItem:
    apply_changes(item, changes)
    commit(db, item)
    return item


def purge(db: Session) -> Dict[str, int]:
    """Delete every rug, then every order. There is no soft delete."""
    try:
        items_deleted = db.query(CarpetItem).delete(synchronize_session=False)
        orders_deleted = db.query(Order).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Purged %s items and %s orders", items_deleted, orders_deleted)
    return {"items_deleted": items_deleted, "orders_deleted": orders_deleted}
