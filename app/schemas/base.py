"""
schemas/base.py — Shared building blocks for request models

API bodies use camelCase keys (assignedVendors, rawEmailContent); models
expose snake_case attributes. Free-form item specification maps are
restricted to a closed set of value types.

Called by: schemas/vendors.py, schemas/rfps.py, schemas/proposals.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing_extensions import TypeAliasType

SpecValue = TypeAliasType(
    "SpecValue", Union[bool, int, float, str, dict[str, "SpecValue"]]
)
SpecMap = dict[str, SpecValue]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
