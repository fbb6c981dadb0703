"""Repair queue routes."""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rugtrack.database import get_db
from rugtrack.routes.orders import store_http_error
from rugtrack.schemas.order import RepairQueueItem
from rugtrack.services import store, workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repairs", tags=["Repairs"])


@router.get("/", response_model=List[RepairQueueItem])
async def list_repair_queue(db: Session = Depends(get_db)):
    """Rugs that are worn, damaged, or already in the repair flow."""
    try:
        orders = store.list_orders(db)
    except SQLAlchemyError:
        logger.exception("Failed to fetch repair queue")
        raise store_http_error("fetch repair requests")

    result = []
    for order in orders:
        for item in order.items:
            if not workflow.needs_repair(item):
                continue
            result.append(RepairQueueItem(
                id=item.id,
                order_id=order.id,
                status=item.status,
                length=item.length,
                width=item.width,
                material=item.material,
                state=item.state,
                photo=item.photo,
                cleaning_cost=item.cleaning_cost or 0,
                repair_cost=item.repair_cost,
                repair_description=item.repair_description,
                client_name=order.client_name,
                has_estimate=bool(item.repair_cost and item.repair_cost > 0)
            ))
    return result
