"""Carpet item routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rugtrack.database import get_db
from rugtrack.models.order import ApprovalStatus, CarpetItem, Order
from rugtrack.routes.orders import get_order_or_404, store_http_error, workflow_http_error
from rugtrack.schemas.order import ItemResponse, ItemUpdate, RepairEstimate
from rugtrack.services import store, workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders/{order_id}/items", tags=["Items"])


def get_item_or_404(db: Session, order: Order, item_id: str) -> CarpetItem:
    item = store.get_item(db, order.id, item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found"
        )
    return item


def save_item(db: Session, order: Order, item: CarpetItem, changes: dict) -> CarpetItem:
    """
    Write a rug change and, in the same commit, escalate the order's
    approval to pending once every rug is measured or estimated.
    """
    store.apply_changes(item, changes)
    if workflow.should_escalate(order):
        store.apply_changes(order, {"approval_status": ApprovalStatus.PENDING.value})
        logger.info("Order %s is waiting for client approval", order.id)
    try:
        store.commit(db, item)
    except SQLAlchemyError:
        logger.exception("Failed to update item %s/%s", order.id, item.id)
        raise store_http_error("update item")
    return item


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    order_id: str,
    item_id: str,
    db: Session = Depends(get_db)
):
    """Get a single rug."""
    order = get_order_or_404(db, order_id)
    return get_item_or_404(db, order, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    order_id: str,
    item_id: str,
    item_update: ItemUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a rug's measurements or status.

    Supplying length, width, material and state on a pending rug marks it
    measured. Moving to ready_for_delivery is refused while the order waits
    for client approval.
    """
    order = get_order_or_404(db, order_id)
    item = get_item_or_404(db, order, item_id)

    try:
        changes = workflow.plan_item_update(order, item, item_update.model_dump(exclude_unset=True))
    except workflow.WorkflowError as exc:
        logger.warning("Rejected update of item %s/%s: %s", order_id, item_id, exc)
        raise workflow_http_error(exc)

    return save_item(db, order, item, changes)


@router.put("/{item_id}/repair-estimate", response_model=ItemResponse)
async def set_repair_estimate(
    order_id: str,
    item_id: str,
    estimate: RepairEstimate,
    db: Session = Depends(get_db)
):
    """Create or edit the repair estimate for a rug."""
    order = get_order_or_404(db, order_id)
    item = get_item_or_404(db, order, item_id)

    try:
        changes = workflow.plan_repair_estimate(
            order, item, estimate.repair_cost, estimate.repair_description
        )
    except workflow.WorkflowError as exc:
        logger.warning("Rejected repair estimate for %s/%s: %s", order_id, item_id, exc)
        raise workflow_http_error(exc)

    return save_item(db, order, item, changes)
