"""Dashboard routes."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rugtrack.database import get_db
from rugtrack.models.order import ApprovalStatus, ItemStatus
from rugtrack.routes.orders import store_http_error
from rugtrack.schemas.dashboard import DashboardStats
from rugtrack.services import store, workflow
from rugtrack.services.pricing import order_totals

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(db: Session = Depends(get_db)):
    """Counters for the operations and data review screens."""
    try:
        orders = store.list_orders(db)
    except SQLAlchemyError:
        logger.exception("Failed to compute dashboard stats")
        raise store_http_error("load dashboard")

    items = [item for order in orders for item in order.items]

    def count(item_status):
        return sum(1 for item in items if item.status == item_status.value)

    return DashboardStats(
        total_orders=len(orders),
        pending_items=count(ItemStatus.PENDING),
        measured_items=count(ItemStatus.MEASURED),
        ready_items=count(ItemStatus.READY_FOR_DELIVERY),
        delivered_items=count(ItemStatus.DELIVERED),
        repair_queue=sum(1 for item in items if workflow.needs_repair(item)),
        awaiting_approval=sum(
            1 for order in orders
            if order.requires_approval and order.approval_status == ApprovalStatus.PENDING.value
        ),
        total_revenue=round(sum(order_totals(order.items).grand_total for order in orders), 2)
    )
