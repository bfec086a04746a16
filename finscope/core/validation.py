from typing import Optional, Union
import math
import re
from fastapi import HTTPException


def parse_amount(value: Optional[Union[str, float, int]], field: str = "Amount") -> float:
    """Parse a user-provided monetary value into a float.

    Accepts formats like:
      - 2500 / 2500.0
      - "2500.50"
      - "2,500.50"
      - "2.500,50"
      - "£2,500.50"
      - "(1,234.56)" -> negative

    Raises HTTPException(400) on missing or clearly invalid input.
    """
    if value is None:
        raise HTTPException(status_code=400, detail=f"{field} is required")

    if isinstance(value, bool):
        raise HTTPException(status_code=400, detail=f"Invalid {field.lower()}")

    if isinstance(value, (int, float)):
        amount = float(value)
        if not math.isfinite(amount):
            raise HTTPException(status_code=400, detail=f"Invalid {field.lower()}")
        return amount

    s = str(value).strip()
    if s == "":
        raise HTTPException(status_code=400, detail=f"{field} is required")

    # remove currency symbols and surrounding whitespace
    s = re.sub(r"[£$€¥ ]", "", s)

    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    if s.startswith("-"):
        negative = True
        s = s[1:]

    # normalize separators: if both '.' and ',' present, the last one is decimal
    comma_count = s.count(',')
    dot_count = s.count('.')
    if comma_count and dot_count:
        if s.rfind(',') > s.rfind('.'):
            s = s.replace('.', '')
            s = s.replace(',', '.')
        else:
            s = s.replace(',', '')
    elif comma_count == 1 and dot_count == 0 and len(s) - s.rfind(',') - 1 != 3:
        s = s.replace(',', '.')
    else:
        s = s.replace(',', '')

    if not re.fullmatch(r"\d+(\.\d+)?|\.\d+", s):
        raise HTTPException(status_code=400, detail=f"Could not parse {field.lower()} '{value}'")

    amount = float(s)
    if negative:
        amount = -amount

    return amount


def parse_optional_amount(value: Optional[Union[str, float, int]], field: str) -> Optional[float]:
    """Like parse_amount, but blank input means "not supplied"."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    return parse_amount(value, field)
