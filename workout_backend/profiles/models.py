# -*- coding: utf-8 -*-
"""Profiles — request/response models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..workouts.models import Experience, sanitize_string

Sex = Literal["male", "female", "prefer_not_to_say"]


def _clean_list(values: Optional[List[str]], max_len: int, what: str) -> Optional[List[str]]:
    if values is None:
        return None
    out = []
    for v in values:
        if len(v) > max_len:
            raise ValueError(f"{what} is too long")
        cleaned = sanitize_string(v)
        if cleaned:
            out.append(cleaned)
    return out


class ProfileFields(BaseModel):
    age: Optional[int] = Field(default=None, ge=13, le=120)
    sex: Optional[Sex] = None
    height_ft: Optional[int] = Field(default=None, ge=0, le=10)
    height_in: Optional[int] = Field(default=None, ge=0, le=11)
    weight_lb: Optional[float] = Field(default=None, gt=0)
    injury_notes: Optional[str] = Field(default=None, max_length=1000)


class ProfileCreateRequest(ProfileFields):
    experience: Experience
    goals: List[str] = Field(..., min_length=1, max_length=10)
    equipmentAvailable: List[str] = Field(default_factory=list, max_length=50)
    constraints: List[str] = Field(default_factory=list, max_length=20)
    health_ack: bool
    data_consent: bool

    @field_validator("goals")
    @classmethod
    def _goals(cls, value: List[str]) -> List[str]:
        return _clean_list(value, 100, "Goal") or []

    @field_validator("equipmentAvailable")
    @classmethod
    def _equipment(cls, value: List[str]) -> List[str]:
        return _clean_list(value, 50, "Equipment name") or []

    @field_validator("constraints")
    @classmethod
    def _constraints(cls, value: List[str]) -> List[str]:
        return _clean_list(value, 200, "Constraint") or []


class ProfileUpdateRequest(ProfileFields):
    experience: Optional[Experience] = None
    goals: Optional[List[str]] = Field(default=None, max_length=10)
    equipmentAvailable: Optional[List[str]] = Field(default=None, max_length=50)
    constraints: Optional[List[str]] = Field(default=None, max_length=20)
    health_ack: Optional[bool] = None
    data_consent: Optional[bool] = None

    @field_validator("goals")
    @classmethod
    def _goals(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_list(value, 100, "Goal")

    @field_validator("equipmentAvailable")
    @classmethod
    def _equipment(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_list(value, 50, "Equipment name")

    @field_validator("constraints")
    @classmethod
    def _constraints(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_list(value, 200, "Constraint")


class Profile(ProfileFields):
    userId: str
    experience: Experience = "beginner"
    goals: List[str] = Field(default_factory=list)
    equipmentAvailable: List[str] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    health_ack: bool = False
    data_consent: bool = False
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ProfileResponse(BaseModel):
    profile: Profile
