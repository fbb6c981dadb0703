"""Bulk migration routes."""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from rugtrack.config import settings
from rugtrack.database import get_db
from rugtrack.schemas.migration import MigrationRequest, MigrationResult
from rugtrack.services import migration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/migrate", tags=["Migration"])


@router.post("/", response_model=MigrationResult)
async def migrate_orders(
    request: Optional[MigrationRequest] = None,
    db: Session = Depends(get_db)
):
    """Import orders from a legacy JSON snapshot. Existing order ids are skipped."""
    path = request.path if request and request.path else settings.MIGRATION_SOURCE
    try:
        return migration.migrate_file(db, path)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Snapshot not found: {path}"
        )
    except (json.JSONDecodeError, ValueError) as exc:
        logger.warning("Unreadable snapshot %s: %s", path, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unreadable snapshot: {exc}"
        )
