"""Bulk migration schemas."""
from typing import Optional, List
from pydantic import BaseModel


class MigrationRequest(BaseModel):
    """Where to read the legacy snapshot from; defaults to the configured file."""
    path: Optional[str] = None


class MigrationResult(BaseModel):
    """Outcome of a bulk migration."""
    migrated: int = 0
    skipped: int = 0
    errors: List[str] = []
