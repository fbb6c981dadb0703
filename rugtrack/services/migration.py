"""Import orders from the legacy JSON snapshot.

The snapshot is a JSON array of orders in the old camelCase shape. Every
record is imported in its own transaction: a broken record is rolled back,
reported, and the rest of the batch carries on. Orders whose id already
exists are skipped, so running the import twice is harmless.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from rugtrack.models.order import ApprovalStatus, ItemStatus, Material, Condition
from rugtrack.schemas.migration import MigrationResult
from rugtrack.services import store

logger = logging.getLogger(__name__)

ITEM_STATUSES = {status.value for status in ItemStatus}
APPROVAL_STATUSES = {status.value for status in ApprovalStatus}
MATERIALS = {material.value for material in Material}
CONDITIONS = {condition.value for condition in Condition}


def load_snapshot(path) -> List:
    """Read the snapshot file; it must hold a JSON array."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError("Snapshot must be a JSON array of orders")
    return records


def _text(value):
    if value is None or value == "":
        return None
    return str(value)


def _parse_created_at(value) -> datetime:
    if value in (None, ""):
        return datetime.now(timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"invalid createdAt '{value}'")
    if isinstance(value, (int, float)):
        # Legacy exports store epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"invalid createdAt '{value}'") from exc
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _choice(value, allowed, field):
    value = _text(value)
    if value is None:
        return None
    if value not in allowed:
        raise ValueError(f"invalid {field} '{value}'")
    return value


def _item_fields(raw: Dict) -> Dict:
    if not isinstance(raw, dict):
        raise ValueError("item must be an object")
    item_id = _text(raw.get("id"))
    if item_id is None:
        raise ValueError("item without id")

    estimate = raw.get("repairEstimate")
    if estimate is None:
        estimate = {}
    if not isinstance(estimate, dict):
        raise ValueError(f"item {item_id} has an invalid repairEstimate")
    repair_cost = raw.get("repairCost")
    if repair_cost is None:
        repair_cost = estimate.get("cost")
    repair_description = _text(raw.get("repairDescription"))
    if repair_description is None:
        repair_description = _text(estimate.get("description"))
    if repair_cost is not None:
        if isinstance(repair_cost, bool):
            raise ValueError(f"item {item_id} has an invalid repair cost")
        repair_cost = float(repair_cost)
        if repair_cost < 0:
            raise ValueError(f"item {item_id} has a negative repair cost")
    if (repair_cost is None) != (repair_description is None):
        raise ValueError(f"item {item_id} has an incomplete repair estimate")

    return {
        "id": item_id,
        "status": _choice(raw.get("status"), ITEM_STATUSES, "status") or ItemStatus.PENDING.value,
        "length": _text(raw.get("length")),
        "width": _text(raw.get("width")),
        "material": _choice(raw.get("material"), MATERIALS, "material"),
        "state": _choice(raw.get("state"), CONDITIONS, "state"),
        "photo": _text(raw.get("photo")),
        "cleaning_cost": float(raw.get("cleaningCost") or 0),
        "repair_cost": repair_cost,
        "repair_description": repair_description,
    }


def order_fields(record: Dict) -> Tuple[Dict, List[Dict]]:
    """Translate one legacy record into order columns and item columns."""
    if not isinstance(record, dict):
        raise ValueError("record must be an object")

    items = record.get("items")
    if not isinstance(items, list) or not items:
        raise ValueError("order has no items")

    requires_approval = record.get("requiresApproval")
    if requires_approval is None:
        requires_approval = False
    if not isinstance(requires_approval, bool):
        raise ValueError(f"invalid requiresApproval '{requires_approval}'")
    approval_status = (
        _choice(record.get("approvalStatus"), APPROVAL_STATUSES, "approvalStatus")
        or ApprovalStatus.NOT_NEEDED.value
    )
    if not requires_approval:
        approval_status = ApprovalStatus.NOT_NEEDED.value

    data = {
        "id": str(record["id"]),
        "client_name": _text(record.get("clientName") or record.get("name")) or "Unknown Client",
        "phone": _text(record.get("phone")),
        "email": _text(record.get("email")),
        "address": _text(record.get("address")),
        "signature": _text(record.get("signature")) or "",
        "receipt": _text(record.get("receipt")),
        "created_at": _parse_created_at(record.get("createdAt")),
        "requires_approval": requires_approval,
        "approval_status": approval_status,
    }
    return data, [_item_fields(item) for item in items]


def migrate_records(db: Session, records: List) -> MigrationResult:
    """Import already-loaded records, collecting per-record failures."""
    result = MigrationResult()
    for index, record in enumerate(records, start=1):
        label = record.get("id") if isinstance(record, dict) and record.get("id") else f"record {index}"
        try:
            if not isinstance(record, dict) or not record.get("id"):
                raise ValueError("order without id")
            if store.get_order(db, str(record["id"])) is not None:
                result.skipped += 1
                continue
            data, items = order_fields(record)
            store.create_order(db, data, items)
            result.migrated += 1
            logger.info("Migrated order %s", label)
        except Exception as exc:
            db.rollback()
            logger.warning("Failed to migrate %s: %s", label, exc)
            result.errors.append(f"{label}: {exc}")
    logger.info(
        "Migration finished: %s migrated, %s skipped, %s errors",
        result.migrated, result.skipped, len(result.errors),
    )
    return result


def migrate_file(db: Session, path) -> MigrationResult:
    """Load a snapshot file and import it."""
    records = load_snapshot(path)
    logger.info("Migrating %s orders from %s", len(records), path)
    return migrate_records(db, records)
