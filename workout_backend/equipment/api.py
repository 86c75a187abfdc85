# -*- coding: utf-8 -*-
"""Equipment endpoints (public)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from .catalog import Equipment, list_equipment

router = APIRouter(prefix="/api/v1/equipment", tags=["Equipment"])


class EquipmentListResponse(BaseModel):
    items: List[Equipment]


@router.get("", response_model=EquipmentListResponse, summary="List the equipment catalog")
def get_equipment():
    return EquipmentListResponse(items=list_equipment())
