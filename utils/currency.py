def format_currency(amount: float, symbol: str = "$") -> str:
    """Format a float as currency string, e.g. '$1,234.56' or '-$12.00'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def parse_amount(text: str) -> float | None:
    """Parse a user-typed amount such as '1,250.50' or '$ 12'. None when unparseable."""
    if text is None:
        return None
    cleaned = str(text).strip().replace(",", "").lstrip("$").strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None
