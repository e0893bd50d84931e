# -*- coding: utf-8 -*-
"""Foods — entries of the food composition database.

Entries follow the Indian Food Composition Tables layout: a code, a common
and scientific name, a region number, and any number of numeric nutrient
columns kept as extra fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field

from ..schema import CamelModel, StoredDocument


class FoodCreateRequest(CamelModel):
    model_config = ConfigDict(extra="allow")

    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    scie: Optional[str] = Field(None, description="Scientific name")
    regn: Optional[int] = Field(None, description="Region number")


class Food(StoredDocument):
    model_config = ConfigDict(extra="allow")

    code: str
    name: str
    scie: Optional[str] = None
    regn: Optional[int] = None

    def nutrient(self, key: str) -> Optional[float]:
        value = (self.model_extra or {}).get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)


class NutrientRangeRequest(CamelModel):
    nutrient: str = Field(..., min_length=1)
    min: float
    max: float
    limit: int = Field(20, ge=1, le=200)
