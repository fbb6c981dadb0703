"""Dashboard schemas."""
from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Counters shown on the operations and data review dashboards."""
    total_orders: int = 0
    pending_items: int = 0
    measured_items: int = 0
    ready_items: int = 0
    delivered_items: int = 0
    repair_queue: int = 0
    awaiting_approval: int = 0
    total_revenue: float = 0
