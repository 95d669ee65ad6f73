"""Schemas for the blocking status endpoint."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class BlockingStatusResponse(BaseModel):
    enabled: bool
    sleep_time: Optional[str]
    has_incomplete_tasks: bool
    should_block: bool
    reason: str
    blocked_packages: List[str]
    request_id: str
