from pydantic import BaseModel, field_validator
from typing import Any, List, Optional
import math
from orm_slots.models.slot import DEFAULT_SLOT_TYPE
from orm_slots.validators import (
    slot_name_validator,
    string_length_validator,
    string_length_optional_validator,
)

class SlotBase(BaseModel):
    name: str
    type: str = DEFAULT_SLOT_TYPE
    value: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return slot_name_validator(255, "Slot name")(v)

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        return string_length_validator(255, "Slot type")(v)

class SlotCreate(SlotBase):
    pass

class SlotUpdate(BaseModel):
    type: Optional[str] = None
    value: Optional[str] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: Optional[str]) -> Optional[str]:
        return string_length_optional_validator(255, "Slot type")(v)

class SlotResponse(BaseModel):
    id: int
    name: str
    type: str
    value: Optional[str] = None

    model_config = {"from_attributes": True}

class SlotHostResponse(BaseModel):
    id: Any
    slots: List[SlotResponse]

    model_config = {"from_attributes": True}

class PaginatedSlotHostsResponse(BaseModel):
    records: List[SlotHostResponse]
    total_records: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def create(cls, records: List[SlotHostResponse], total_count: int, page: int, page_size: int):
        total_pages = math.ceil(total_count / page_size) if total_count > 0 else 0
        return cls(
            records=records,
            total_records=total_count,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )
