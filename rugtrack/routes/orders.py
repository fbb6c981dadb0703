"""Order routes."""
import csv
import io
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rugtrack.database import get_db
from rugtrack.models.order import Order, ApprovalStatus
from rugtrack.schemas.order import (
    OrderCreate, OrderResponse, OrderUpdate, ApprovalDecision,
    ItemResponse, NextOrderId, PurgeResult
)
from rugtrack.services import store, workflow
from rugtrack.services.pricing import order_totals

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def order_response(order: Order) -> OrderResponse:
    """Build the order payload, deriving totals from the current rugs."""
    totals = order_totals(order.items)
    return OrderResponse(
        id=order.id,
        client_name=order.client_name,
        phone=order.phone,
        email=order.email,
        address=order.address,
        signature=order.signature,
        receipt=order.receipt,
        requires_approval=order.requires_approval,
        approval_status=order.approval_status,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[ItemResponse.model_validate(item) for item in order.items],
        **totals.to_dict()
    )


def workflow_http_error(exc: workflow.WorkflowError) -> HTTPException:
    """Map a rejected workflow action to an HTTP error."""
    if isinstance(exc, workflow.IncompleteMeasurement):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_409_CONFLICT
    return HTTPException(status_code=code, detail=str(exc))


def store_http_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}, please try again"
    )


def get_order_or_404(db: Session, order_id: str) -> Order:
    order = store.get_order(db, order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    return order


def matches_filters(order: Order, status_filter: Optional[str], search: Optional[str]) -> bool:
    """
    Data review filtering.

    ``status_filter`` is either an item status (any rug in that status) or
    ``pending_approval`` / ``approved`` for the order's approval state.
    """
    if search:
        needle = search.lower()
        haystack = [order.id, order.client_name, order.phone, order.email]
        if not any(needle in (value or "").lower() for value in haystack):
            return False
    if not status_filter or status_filter == "all":
        return True
    if status_filter == "pending_approval":
        return order.approval_status == ApprovalStatus.PENDING.value
    if status_filter == ApprovalStatus.APPROVED.value:
        return order.approval_status == ApprovalStatus.APPROVED.value
    return any(item.status == status_filter for item in order.items)


@router.get("/", response_model=List[OrderResponse])
async def list_orders(
    status_filter: Optional[str] = Query(None, description="Item status, 'pending_approval' or 'approved'"),
    search: Optional[str] = Query(None, description="Match order id, client name, phone or email"),
    db: Session = Depends(get_db)
):
    """List all orders with their rugs, newest first."""
    try:
        orders = store.list_orders(db)
    except SQLAlchemyError:
        logger.exception("Failed to fetch orders")
        raise store_http_error("fetch orders")

    return [order_response(order) for order in orders if matches_filters(order, status_filter, search)]


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db)
):
    """Take in a new order with at least one rug."""
    if not order_data.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order ID is required"
        )
    if not order_data.items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one item is required"
        )
    item_ids = [item.id for item in order_data.items]
    if len(set(item_ids)) != len(item_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Item IDs must be unique within an order"
        )

    # Check if the id is still free
    if store.get_order(db, order_data.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order ID already exists"
        )

    data = order_data.model_dump(exclude={"items"})
    items = [workflow.plan_new_item(item.model_dump()) for item in order_data.items]
    try:
        order = store.create_order(db, data, items)
    except IntegrityError:
        # Lost the race for this id against another intake
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order ID already exists"
        )
    except SQLAlchemyError:
        logger.exception("Failed to save order %s", order_data.id)
        raise store_http_error("save order")

    logger.info("Created order %s with %s items", order.id, len(order.items))
    return order_response(order)


@router.delete("/", response_model=PurgeResult)
async def purge_orders(db: Session = Depends(get_db)):
    """Delete every order and rug. Administrative reset, cannot be undone."""
    try:
        return store.purge(db)
    except SQLAlchemyError:
        logger.exception("Failed to purge orders")
        raise store_http_error("clear orders")


@router.get("/next-id", response_model=NextOrderId)
async def get_next_order_id(db: Session = Depends(get_db)):
    """Suggest the id for the next intake."""
    try:
        existing = store.list_order_ids(db)
    except SQLAlchemyError:
        logger.exception("Failed to generate order id")
        raise store_http_error("generate order ID")
    return NextOrderId(next_id=workflow.next_order_id(existing))


@router.get("/export/csv")
async def export_orders_csv(db: Session = Depends(get_db)):
    """Export every rug with its order context and costs as CSV."""
    try:
        orders = store.list_orders(db)
    except SQLAlchemyError:
        logger.exception("Failed to export orders")
        raise store_http_error("export orders")

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        'client', 'order_id', 'item_id', 'item_status', 'approval',
        'dimensions', 'material', 'state', 'cleaning_cost', 'repair_cost', 'total'
    ])

    for order in orders:
        for item in order.items:
            cleaning = item.cleaning_cost or 0.0
            repair = item.repair_cost or 0.0
            writer.writerow([
                order.client_name,
                order.id,
                item.id,
                item.status,
                order.approval_status if order.requires_approval else 'N/A',
                f"{item.length}m x {item.width}m" if item.length and item.width else '',
                item.material or '',
                item.state or '',
                f"{cleaning:.2f}",
                f"{repair:.2f}",
                f"{cleaning + repair:.2f}"
            ])

    output.seek(0)
    filename = f"orders_detailed_{date.today().isoformat()}.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    db: Session = Depends(get_db)
):
    """Get a specific order with all rugs and totals."""
    return order_response(get_order_or_404(db, order_id))


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    order_update: OrderUpdate,
    db: Session = Depends(get_db)
):
    """Update an order. Toggling requires_approval resets the approval status."""
    order = get_order_or_404(db, order_id)

    try:
        changes = workflow.plan_order_update(order, order_update.model_dump(exclude_unset=True))
    except workflow.WorkflowError as exc:
        logger.warning("Rejected update of order %s: %s", order_id, exc)
        raise workflow_http_error(exc)

    try:
        store.update_order(db, order, changes)
    except SQLAlchemyError:
        logger.exception("Failed to update order %s", order_id)
        raise store_http_error("update order")
    return order_response(order)


@router.post("/{order_id}/approval", response_model=OrderResponse)
async def decide_approval(
    order_id: str,
    decision: ApprovalDecision,
    db: Session = Depends(get_db)
):
    """Record the client's approval or rejection of the estimate."""
    order = get_order_or_404(db, order_id)

    try:
        changes = workflow.plan_approval_decision(order, decision.decision)
    except workflow.WorkflowError as exc:
        logger.warning("Rejected approval decision on order %s: %s", order_id, exc)
        raise workflow_http_error(exc)

    if changes:
        try:
            store.update_order(db, order, changes)
        except SQLAlchemyError:
            logger.exception("Failed to record approval for order %s", order_id)
            raise store_http_error("record approval")
        logger.info("Order %s %s by client", order_id, decision.decision.value)
    return order_response(order)
