# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-09-22
# Description: health.py
# -----------------------------------------------------------------------------
from typing import Dict

from pydantic import BaseModel

class HealthResponse(BaseModel):
    status: str
    message: str

class CheckSummary(BaseModel):
    total: int
    passed: int
    failed: int

class DeepHealthResponse(BaseModel):
    status: str
    visual_mode: str
    results: Dict[str, bool]
    summary: CheckSummary
