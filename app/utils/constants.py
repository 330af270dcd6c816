"""Marketplace reference data."""

CURRENCY_CODE = "XAF"
CURRENCY_SYMBOL = "FCFA"

# Cameroon regions (code -> English name)
REGIONS: dict[str, str] = {
    "AD": "Adamawa",
    "CE": "Centre",
    "EN": "Far North",
    "ES": "East",
    "LT": "Littoral",
    "NO": "North",
    "NW": "Northwest",
    "OU": "West",
    "SU": "South",
    "SW": "Southwest",
}

AMENITIES = (
    "wifi",
    "ac",
    "parking",
    "pool",
    "kitchen",
    "washer",
    "tv",
    # local essentials
    "generator",
    "water_tank",
    "security_guard",
    "gated",
    "hot_water",
)


def format_xaf(amount: int) -> str:
    """Format an amount the way guests see it, e.g. ``85 500 FCFA``."""
    return f"{amount:,}".replace(",", " ") + f" {CURRENCY_SYMBOL}"
