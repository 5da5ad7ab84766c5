"""Request and response models for the invoice endpoint"""

import math
import re
from pydantic import BaseModel
from typing import Optional, Union

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int_prefix(value: Union[str, int, float, None]) -> Optional[int]:
    """
    Parse the leading integer of a value the way form inputs are read

    "2024" -> 2024, " 3abc" -> 3, 2024.5 -> 2024, "abc" -> None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _is_blank(value) -> bool:
    # Numeric zero counts as absent, the string "0" does not
    if value is None or value == "":
        return True
    return isinstance(value, (int, float)) and value == 0


class GenerateInvoicesRequest(BaseModel):
    """Body of POST /api/generate-pdf; presence is checked by the route"""
    year: Optional[Union[int, float, str]] = None
    month: Optional[Union[int, float, str]] = None
    email: Optional[str] = None

    def missing_fields(self) -> bool:
        return any(_is_blank(v) for v in (self.year, self.month, self.email))


class GenerateInvoicesResponse(BaseModel):
    success: bool = True
    message: str
