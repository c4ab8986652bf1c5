def format_currency(amount: float, symbol: str = "$") -> str:
    """Format a float as currency string, e.g. '$1,234.56'."""
    return f"{symbol}{amount:,.2f}"


def format_signed(amount: float, symbol: str = "$") -> str:
    """Format with +/- sign."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{symbol}{abs(amount):,.2f}"


def parse_amount(text: str) -> float:
    """Parse user input such as '-54,23' or '+200'. Raises ValueError."""
    cleaned = text.strip().replace(",", ".")
    if not cleaned or cleaned in ("-", "+"):
        raise ValueError("Amount cannot be empty.")
    return float(cleaned)


def apply_sign(amount: float, is_income: bool) -> float:
    """Income is kept positive, everything else negative. Zero stays zero."""
    if amount == 0:
        return 0.0
    return abs(amount) if is_income else -abs(amount)
