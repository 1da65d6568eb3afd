from typing import Optional
import re

SLOT_NAME_PATTERN = r'^[A-Za-z_][A-Za-z0-9_]*$'

def string_length_validator(max_length: int, field_name: str = "Value"):
    def validator(v: str) -> str:
        if not v or len(v.strip()) == 0:
            raise ValueError(f'{field_name} cannot be empty')
        if len(v) > max_length:
            raise ValueError(f'{field_name} cannot exceed {max_length} characters')
        return v.strip()
    return validator

def string_length_optional_validator(max_length: int, field_name: str = "Value"):
    def validator(v: Optional[str]) -> Optional[str]:
        if v is not None:
            return string_length_validator(max_length, field_name)(v)
        return v
    return validator

def slot_name_validator(max_length: int = 255, field_name: str = "Slot name"):
    def validator(v: str) -> str:
        v = string_length_validator(max_length, field_name)(v)
        if not re.match(SLOT_NAME_PATTERN, v):
            raise ValueError(f'{field_name} must start with a letter or underscore and contain only letters, digits and underscores')
        return v
    return validator
