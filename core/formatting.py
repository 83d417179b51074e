"""
formatting.py
--------------
Italian display helpers for amounts and dates.
"""

MESI = [
    "gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno",
    "luglio", "agosto", "settembre", "ottobre", "novembre", "dicembre",
]


def format_currency(amount: float) -> str:
    """
    Formats an amount as Italian EUR: "1.234,56 €".

    Example:
        >>> format_currency(453.25)
        '453,25 €'
    """
    text = f"{abs(amount):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    sign = "-" if round(amount, 2) < 0 else ""
    return f"{sign}{text} €"


def format_month_year(month: int, year: int) -> str:
    """Italian month name and year, e.g. "marzo 2025"."""
    return f"{MESI[month - 1]} {year}"
