"""Order and rug workflow rules.

Everything here is pure: functions look at an order (and its items) plus a
proposed change and either return the field values to write or raise a
``WorkflowError``. Nothing is persisted here, so callers can apply the result
in whatever session they hold.
"""
import re
from typing import Dict, Iterable, List, Optional

from rugtrack.models.order import ApprovalStatus, ItemStatus, Condition
from rugtrack.services.pricing import cleaning_cost


class WorkflowError(Exception):
    """Base class for rejected workflow actions."""


class InvalidTransition(WorkflowError):
    """The requested status change is not a legal edge."""


class ApprovalRequired(WorkflowError):
    """The order is waiting for client approval."""


class IncompleteMeasurement(WorkflowError):
    """A rug cannot be marked measured without all measurement fields."""


class ApprovalNotRequested(WorkflowError):
    """A client decision was sent for an order that does not need one."""


MEASUREMENT_FIELDS = ("length", "width", "material", "state")
PRICING_FIELDS = ("length", "width", "material")

# Legal status edges. Keeping the same status is always allowed.
ITEM_TRANSITIONS = {
    ItemStatus.PENDING.value: {
        ItemStatus.MEASURED.value,
        ItemStatus.REPAIR_NEEDED.value,
        ItemStatus.REPAIR_ESTIMATED.value,
    },
    ItemStatus.MEASURED.value: {
        ItemStatus.READY_FOR_DELIVERY.value,
        ItemStatus.REPAIR_NEEDED.value,
        ItemStatus.REPAIR_ESTIMATED.value,
    },
    ItemStatus.REPAIR_NEEDED.value: {
        ItemStatus.MEASURED.value,
        ItemStatus.REPAIR_ESTIMATED.value,
    },
    ItemStatus.REPAIR_ESTIMATED.value: {
        ItemStatus.MEASURED.value,
        ItemStatus.READY_FOR_DELIVERY.value,
    },
    ItemStatus.READY_FOR_DELIVERY.value: {
        ItemStatus.DELIVERED.value,
    },
    ItemStatus.DELIVERED.value: set(),
}

# "cleaning_estimated" is never produced by any transition above; it is
# accepted here so legacy rows carrying it still count.
ESCALATION_STATUSES = {
    ItemStatus.MEASURED.value,
    "cleaning_estimated",
    ItemStatus.REPAIR_ESTIMATED.value,
}

DELIVERY_STATUSES = {
    ItemStatus.READY_FOR_DELIVERY.value,
    ItemStatus.DELIVERED.value,
}

REPAIR_CONDITIONS = {Condition.WORN.value, Condition.DAMAGED.value}
REPAIR_STATUSES = {ItemStatus.REPAIR_NEEDED.value, ItemStatus.REPAIR_ESTIMATED.value}

# Order columns that may be cleared with an explicit null
NULLABLE_ORDER_FIELDS = {"phone", "email", "address", "receipt"}

ORDER_ID_PATTERN = re.compile(r"ORD-(\d+)")


def _value(raw):
    return raw.value if hasattr(raw, "value") else raw


def approval_blocks_delivery(order) -> bool:
    """True while the order waits for the client to approve the estimate."""
    return bool(order.requires_approval) and order.approval_status != ApprovalStatus.APPROVED.value


def check_item_transition(order, current: str, target: str) -> None:
    """Raise unless ``current -> target`` is allowed for a rug of ``order``."""
    current = _value(current) or ItemStatus.PENDING.value
    target = _value(target)
    if current == target:
        return
    if target not in ITEM_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Cannot move item from '{current}' to '{target}'")
    if target == ItemStatus.READY_FOR_DELIVERY.value and approval_blocks_delivery(order):
        raise ApprovalRequired(
            f"Order {order.id} requires client approval before delivery "
            f"(approval status '{order.approval_status}')"
        )


def plan_new_item(data: Dict) -> Dict:
    """Column values for a rug taken in at intake; it always starts pending."""
    fields = {key: _value(value) for key, value in data.items()}
    fields["status"] = ItemStatus.PENDING.value
    fields["cleaning_cost"] = cleaning_cost(fields.get("length"), fields.get("width"), fields.get("material"))
    return fields


def plan_item_update(order, item, patch: Dict) -> Dict:
    """
    Work out the column values to write for a rug update.

    ``patch`` holds only the fields the caller supplied. A pending rug that
    receives all measurement fields becomes measured even when no status is
    given. The cleaning cost is recomputed whenever a pricing input changes.
    """
    changes = {key: _value(value) for key, value in patch.items()}
    current = item.status or ItemStatus.PENDING.value
    merged = {field: changes.get(field, getattr(item, field)) for field in MEASUREMENT_FIELDS}
    touched_measurement = any(field in changes for field in MEASUREMENT_FIELDS)

    if "status" not in changes or changes["status"] is None:
        changes.pop("status", None)
        if current == ItemStatus.PENDING.value and touched_measurement and all(merged.values()):
            changes["status"] = ItemStatus.MEASURED.value
    target = changes.get("status", current)

    if target == ItemStatus.MEASURED.value and target != current:
        missing = [field for field in MEASUREMENT_FIELDS if not merged[field]]
        if missing:
            raise IncompleteMeasurement(
                f"Cannot mark item {item.id} measured, missing: {', '.join(missing)}"
            )

    check_item_transition(order, current, target)

    newly_measured = target == ItemStatus.MEASURED.value and target != current
    if newly_measured or any(field in changes for field in PRICING_FIELDS):
        changes["cleaning_cost"] = cleaning_cost(merged["length"], merged["width"], merged["material"])

    return changes


def plan_repair_estimate(order, item, cost: float, description: str) -> Dict:
    """Create or edit a repair estimate; the rug moves to repair_estimated."""
    if cost is None or not description:
        raise WorkflowError("Repair cost and description must be given together")
    check_item_transition(order, item.status, ItemStatus.REPAIR_ESTIMATED.value)
    return {
        "repair_cost": round(float(cost), 2),
        "repair_description": description,
        "status": ItemStatus.REPAIR_ESTIMATED.value,
    }


def should_escalate(order, items: Optional[Iterable] = None) -> bool:
    """
    Decide whether the order's approval should flip to pending.

    Fires only while the status is exactly ``not_needed`` and every rug has
    been measured or estimated.
    """
    items = list(order.items if items is None else items)
    if not order.requires_approval:
        return False
    if order.approval_status != ApprovalStatus.NOT_NEEDED.value:
        return False
    return bool(items) and all(item.status in ESCALATION_STATUSES for item in items)


def plan_order_update(order, patch: Dict) -> Dict:
    """Apply the requires-approval toggle and keep approval status consistent."""
    changes = {}
    for key, value in patch.items():
        if value is None and key not in NULLABLE_ORDER_FIELDS:
            continue
        changes[key] = _value(value)

    requires = changes.get("requires_approval")
    if requires is not None and bool(requires) != bool(order.requires_approval):
        changes["approval_status"] = (
            ApprovalStatus.PENDING.value if requires else ApprovalStatus.NOT_NEEDED.value
        )

    final_requires = changes.get("requires_approval", order.requires_approval)
    final_status = changes.get("approval_status", order.approval_status)
    if not final_requires and final_status != ApprovalStatus.NOT_NEEDED.value:
        raise InvalidTransition(
            f"Approval status must be 'not_needed' when order {order.id} does not require approval"
        )
    return changes


def plan_approval_decision(order, decision: str) -> Dict:
    """
    Record the client's answer to an estimate.

    Returns an empty dict when the order is already approved, so repeating
    the call changes nothing.
    """
    decision = _value(decision)
    if decision not in (ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED.value):
        raise InvalidTransition(f"Unknown approval decision '{decision}'")
    if not order.requires_approval:
        raise ApprovalNotRequested(f"Order {order.id} does not require client approval")
    if order.approval_status == ApprovalStatus.APPROVED.value:
        return {}
    if order.approval_status == ApprovalStatus.REJECTED.value:
        raise InvalidTransition(
            f"Order {order.id} was rejected; staff must re-request approval"
        )
    return {"approval_status": decision}


def is_delivery_ready(order) -> bool:
    """All rugs ready or delivered, and at least one still to hand over."""
    statuses = [item.status for item in order.items]
    if not statuses:
        return False
    return (
        all(status in DELIVERY_STATUSES for status in statuses)
        and any(status == ItemStatus.READY_FOR_DELIVERY.value for status in statuses)
    )


def needs_repair(item) -> bool:
    """Whether the rug belongs on the repair team's queue."""
    return item.state in REPAIR_CONDITIONS or item.status in REPAIR_STATUSES


def next_order_id(existing_ids: Iterable[str]) -> str:
    """
    Next sequential order id, e.g. ORD-004 after ORD-001 and ORD-003.

    Not safe against concurrent intake: two requests may read the same
    maximum. The primary key rejects the second insert.
    """
    numbers = []
    for order_id in existing_ids:
        match = ORDER_ID_PATTERN.search(order_id or "")
        if match:
            number = int(match.group(1))
            if number > 0:
                numbers.append(number)
    next_number = max(numbers) + 1 if numbers else 1
    return f"ORD-{next_number:03d}"


def plan_route(order_ids: Iterable[str]) -> List[str]:
    """Placeholder route sequencing: stops in id order."""
    return sorted(set(order_ids))
