# utils/currency.py
from typing import Union

Number = Union[str, float, int, None]


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------

def clean_currency(val: Number) -> float:
    """
    Cleans a currency value (e.g., "$140,000.00", 140000, None) into a float.
    Blank input is 0.0; text that is not a number raises ValueError.
    """
    if val is None or val == "":
        return 0.0
    if isinstance(val, (int, float)):
        return float(val)

    cleaned_val = str(val).replace('$', '').replace(',', '').strip()
    if not cleaned_val:
        return 0.0
    try:
        return float(cleaned_val)
    except ValueError:
        raise ValueError(f"Not a currency amount: {val!r}")


def clean_rate(raw_input: Number) -> Union[float, None]:
    """
    Converts a rate given as a decimal (0.03), a percent string ('3%') or a
    whole percent (3) into a decimal where 1.0 represents 100%.

    Numbers greater than 1 are read as whole percents. Returns None for
    blank input.
    """
    if raw_input is None:
        return None

    if isinstance(raw_input, (float, int)):
        numeric_val = float(raw_input)
        return numeric_val / 100.0 if numeric_val > 1.0 else numeric_val

    s = str(raw_input).strip()
    if not s:
        return None

    is_percent = s.endswith('%')
    s = s.replace('%', '').replace(',', '').replace(' ', '')
    try:
        numeric_val = float(s)
    except ValueError:
        raise ValueError(f"Not a rate: {raw_input!r}")

    if is_percent or numeric_val > 1.0:
        return numeric_val / 100.0
    return numeric_val


# ----------------------------------------------------------------------
# Formatting
# ----------------------------------------------------------------------

def format_percent_output(value: Union[float, None], decimal_places: int = 1) -> str:
    """Formats a float (0.23) to a display string ('23.0%')."""
    if value is None:
        return ""
    return f"{float(value) * 100:.{decimal_places}f}%"


def format_currency_output(val, decimals=0):
    """
    Formats a float/int into a clean currency string ($1,234,567).

    Args:
        val (float): The numerical value to format.
        decimals (int): Number of decimal places.
    """
    if val is None:
        val = 0.0
    sign = "-" if val < 0 else ""
    return f"{sign}${abs(val):,.{decimals}f}"
