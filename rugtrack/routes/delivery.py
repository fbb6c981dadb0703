"""Delivery routes."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rugtrack.database import get_db
from rugtrack.models.order import ItemStatus
from rugtrack.routes.orders import order_response, store_http_error
from rugtrack.schemas.delivery import RouteRequest, RouteResponse, RouteStop
from rugtrack.schemas.order import OrderResponse
from rugtrack.services import store, workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery", tags=["Delivery"])


@router.get("/ready", response_model=List[OrderResponse])
async def list_ready_orders(db: Session = Depends(get_db)):
    """Orders whose rugs are all ready or delivered, with at least one still to hand over."""
    try:
        orders = store.list_orders(db)
    except SQLAlchemyError:
        logger.exception("Failed to fetch delivery-ready orders")
        raise store_http_error("fetch orders")

    return [order_response(order) for order in orders if workflow.is_delivery_ready(order)]


@router.post("/route", response_model=RouteResponse)
async def plan_route(
    route_request: RouteRequest,
    db: Session = Depends(get_db)
):
    """
    Sequence the selected orders into delivery stops.

    This is a placeholder ordering by order id, not a route optimizer.
    """
    if len(set(route_request.order_ids)) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Select at least two different orders to plan a route"
        )

    orders = {}
    for order_id in route_request.order_ids:
        order = store.get_order(db, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Order {order_id} not found"
            )
        if not workflow.is_delivery_ready(order):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order {order_id} is not ready for delivery"
            )
        orders[order_id] = order

    stops = []
    for position, order_id in enumerate(workflow.plan_route(orders), start=1):
        order = orders[order_id]
        stops.append(RouteStop(
            stop=position,
            order_id=order.id,
            client_name=order.client_name,
            address=order.address,
            ready_items=sum(
                1 for item in order.items if item.status == ItemStatus.READY_FOR_DELIVERY.value
            )
        ))
    return RouteResponse(stops=stops)
