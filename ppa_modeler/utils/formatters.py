"""Number and currency formatting utilities for the PPA Deal Modeler.

Formatting is a presentation concern only: values are rounded here for
display and never fed back into a projection.
"""

from typing import Optional

CURRENCY_PREFIX = "฿"


def format_currency(value: float, decimals: int = 0, prefix: str = CURRENCY_PREFIX) -> str:
    """Format a number as currency string.

    Args:
        value: The numeric value to format.
        decimals: Number of decimal places.
        prefix: Currency symbol prefix.

    Returns:
        Formatted currency string (e.g., "฿1.2M").
    """
    if abs(value) >= 1e9:
        return f"{prefix}{value / 1e9:,.{decimals}f}B"
    if abs(value) >= 1e6:
        return f"{prefix}{value / 1e6:,.{decimals}f}M"
    if abs(value) >= 1e3:
        return f"{prefix}{value / 1e3:,.{decimals}f}K"
    return f"{prefix}{value:,.{decimals}f}"


def format_currency_exact(value: float, decimals: int = 0, prefix: str = CURRENCY_PREFIX) -> str:
    """Format a number as exact currency string without abbreviation.

    Returns:
        Formatted currency string (e.g., "฿1,234,567").
    """
    return f"{prefix}{value:,.{decimals}f}"


def format_millions(value: float) -> str:
    """Format a value in whole millions, the modeler's headline format.

    Returns:
        e.g. "123M" for 123,456,789 and "-34M" for -33,900,000.
    """
    return f"{round(value / 1e6):,}M"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a value already expressed in percent units.

    Args:
        value: Percentage (e.g., 18 for 18%).
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string (e.g., "18.0%").
    """
    return f"{value:,.{decimals}f}%"


def format_number(value: float, decimals: int = 0) -> str:
    """Format a number with comma separators (e.g., "17,546,526")."""
    return f"{value:,.{decimals}f}"


def format_year(value: Optional[int]) -> str:
    """Format a projection year, or "Not achieved" when None."""
    if value is None:
        return "Not achieved"
    return f"Year {value}"
