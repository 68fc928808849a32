"""Display formatting for yen amounts."""

YEN_SIGN = "￥"


def format_yen(amount: int) -> str:
    """Format ``amount`` as ``￥1,234``; negatives keep a leading minus."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{YEN_SIGN}{abs(int(amount)):,}"


def format_signed_yen(amount: int) -> str:
    # Balances show an explicit plus when not negative.
    prefix = "+" if amount >= 0 else ""
    return prefix + format_yen(amount)
