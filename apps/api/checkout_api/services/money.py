from decimal import ROUND_HALF_EVEN, Decimal

# ISO-4217 minor unit exponents that differ from the usual two decimals.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "ISK",
        "JPY",
        "KMF",
        "KRW",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)
THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"})


def currency_exponent(currency: str) -> int:
    code = currency.upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def to_subunits(amount: Decimal, currency: str) -> int:
    """Convert a major-unit amount to integer subunits with banker's rounding."""
    scaled = Decimal(amount).scaleb(currency_exponent(currency))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def from_subunits(amount_subunits: int, currency: str) -> Decimal:
    return Decimal(amount_subunits).scaleb(-currency_exponent(currency))
