# -*- coding: utf-8 -*-
"""Equipment — static catalog."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class Equipment(BaseModel):
    slug: str
    label: str


EQUIPMENT_CATALOG: tuple[Equipment, ...] = (
    Equipment(slug="bodyweight", label="Bodyweight"),
    Equipment(slug="dumbbells", label="Dumbbells"),
    Equipment(slug="barbell", label="Barbell"),
    Equipment(slug="kettlebell", label="Kettlebell"),
    Equipment(slug="bench", label="Bench"),
    Equipment(slug="resistance_bands", label="Resistance Bands"),
    Equipment(slug="pullup_bar", label="Pull-up Bar"),
    Equipment(slug="cable_machine", label="Cable Machine"),
    Equipment(slug="treadmill", label="Treadmill"),
    Equipment(slug="rowing_machine", label="Rowing Machine"),
    Equipment(slug="stationary_bike", label="Stationary Bike"),
    Equipment(slug="full_gym", label="Full Gym"),
)


def list_equipment() -> List[Equipment]:
    return sorted(EQUIPMENT_CATALOG, key=lambda e: e.label.lower())

