"""Multi-currency display helpers."""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from rentalcore.config.settings import get_settings


class Currency(NamedTuple):
    code: str
    symbol: str
    name: str
    locale: str


SUPPORTED_CURRENCIES: list[Currency] = [
    # Europe
    Currency("EUR", "€", "Euro", "fr-FR"),
    Currency("GBP", "£", "British Pound", "en-GB"),
    Currency("CHF", "CHF", "Swiss Franc", "de-CH"),
    Currency("SEK", "kr", "Swedish Krona", "sv-SE"),
    Currency("NOK", "kr", "Norwegian Krone", "nb-NO"),
    Currency("DKK", "kr", "Danish Krone", "da-DK"),
    Currency("PLN", "zł", "Polish Zloty", "pl-PL"),
    Currency("CZK", "Kč", "Czech Koruna", "cs-CZ"),
    Currency("HUF", "Ft", "Hungarian Forint", "hu-HU"),
    Currency("RON", "lei", "Romanian Leu", "ro-RO"),
    # North America
    Currency("USD", "$", "US Dollar", "en-US"),
    Currency("CAD", "CA$", "Canadian Dollar", "en-CA"),
    Currency("MXN", "MX$", "Mexican Peso", "es-MX"),
    # South America
    Currency("BRL", "R$", "Brazilian Real", "pt-BR"),
    Currency("ARS", "AR$", "Argentine Peso", "es-AR"),
    Currency("CLP", "CL$", "Chilean Peso", "es-CL"),
    Currency("COP", "CO$", "Colombian Peso", "es-CO"),
    # Asia Pacific
    Currency("AUD", "A$", "Australian Dollar", "en-AU"),
    Currency("NZD", "NZ$", "New Zealand Dollar", "en-NZ"),
    Currency("JPY", "¥", "Japanese Yen", "ja-JP"),
    Currency("CNY", "¥", "Chinese Yuan", "zh-CN"),
    Currency("INR", "₹", "Indian Rupee", "en-IN"),
    Currency("SGD", "S$", "Singapore Dollar", "en-SG"),
    Currency("HKD", "HK$", "Hong Kong Dollar", "zh-HK"),
    Currency("KRW", "₩", "South Korean Won", "ko-KR"),
    Currency("TWD", "NT$", "New Taiwan Dollar", "zh-TW"),
    Currency("THB", "฿", "Thai Baht", "th-TH"),
    Currency("MYR", "RM", "Malaysian Ringgit", "ms-MY"),
    Currency("PHP", "₱", "Philippine Peso", "fil-PH"),
    Currency("VND", "₫", "Vietnamese Dong", "vi-VN"),
    # Middle East & Africa
    Currency("AED", "د.إ", "UAE Dirham", "ar-AE"),
    Currency("SAR", "﷼", "Saudi Riyal", "ar-SA"),
    Currency("ILS", "₪", "Israeli Shekel", "he-IL"),
    Currency("ZAR", "R", "South African Rand", "en-ZA"),
    Currency("MAD", "د.م.", "Moroccan Dirham", "ar-MA"),
]

_BY_CODE = {currency.code: currency for currency in SUPPORTED_CURRENCIES}

# ISO 3166-1 alpha-2 -> ISO 4217
COUNTRY_DEFAULT_CURRENCY: dict[str, str] = {
    **dict.fromkeys(
        ["AT", "BE", "DE", "ES", "FI", "FR", "GR", "IE", "IT", "LU", "MC", "NL", "PT", "HR"],
        "EUR",
    ),
    "GB": "GBP",
    "CH": "CHF",
    "SE": "SEK",
    "NO": "NOK",
    "DK": "DKK",
    "PL": "PLN",
    "CZ": "CZK",
    "HU": "HUF",
    "RO": "RON",
    "US": "USD",
    "CA": "CAD",
    "MX": "MXN",
    "BR": "BRL",
    "AR": "ARS",
    "CL": "CLP",
    "CO": "COP",
    "AU": "AUD",
    "NZ": "NZD",
    "JP": "JPY",
    "CN": "CNY",
    "IN": "INR",
    "SG": "SGD",
    "HK": "HKD",
    "KR": "KRW",
    "TW": "TWD",
    "TH": "THB",
    "MY": "MYR",
    "PH": "PHP",
    "VN": "VND",
    "AE": "AED",
    "SA": "SAR",
    "IL": "ILS",
    "ZA": "ZAR",
    "MA": "MAD",
}

# Currencies displayed without minor units
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW", "VND", "CLP"})


def get_default_currency_for_country(country_code: Optional[str]) -> str:
    return COUNTRY_DEFAULT_CURRENCY.get((country_code or "").upper(), "EUR")


def get_currency_by_code(code: str) -> Optional[Currency]:
    return _BY_CODE.get(code)


def get_currency_symbol(code: str) -> str:
    currency = get_currency_by_code(code)
    return currency.symbol if currency else code


def get_currencies_sorted_by_name() -> list[Currency]:
    return sorted(SUPPORTED_CURRENCIES, key=lambda currency: currency.name)


def _group(digits: str, separator: str) -> str:
    head = len(digits) % 3 or 3
    parts = [digits[:head]] + [digits[i : i + 3] for i in range(head, len(digits), 3)]
    return separator.join(parts)


def format_amount(amount: Decimal, locale: str = "fr", decimals: int = 2) -> str:
    """Number with locale grouping: "1 234,50" (fr) or "1,234.50" (en)."""
    quantum = Decimal(1).scaleb(-decimals)
    value = Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer, _, fraction = format(abs(value), "f").partition(".")

    if locale == "en":
        text = _group(integer, ",") + (f".{fraction}" if fraction else "")
    else:
        text = _group(integer, " ") + (f",{fraction}" if fraction else "")
    return sign + text


def format_currency(
    amount: Decimal, currency: Optional[str] = None, locale: Optional[str] = None
) -> str:
    """Format an amount: "1 234,50 €" in French, "€1,234.50" in English."""
    code = currency or get_settings().default_currency
    info = get_currency_by_code(code)
    if locale is None:
        locale = info.locale.split("-")[0] if info else get_settings().default_locale
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    symbol = get_currency_symbol(code)
    number = format_amount(amount, locale, decimals)

    if locale == "en":
        if number.startswith("-"):
            return f"-{symbol}{number[1:]}"
        return f"{symbol}{number}"
    return f"{number} {symbol}"


def format_currency_compact(amount: Decimal, currency: str = "EUR") -> str:
    """Chart labels such as "10k€" or "1.2M€"."""
    symbol = get_currency_symbol(currency)
    amount = Decimal(amount)
    if amount >= 1_000_000:
        return f"{(amount / 1_000_000).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}M{symbol}"
    if amount >= 1000:
        return f"{(amount / 1000).quantize(Decimal('1'), rounding=ROUND_HALF_UP)}k{symbol}"
    return f"{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)}{symbol}"


def format_amount_with_symbol(amount: Decimal, currency: str = "EUR", decimals: int = 2) -> str:
    """E.g. "10.50€", for inputs and tables."""
    quantum = Decimal(1).scaleb(-decimals)
    value = Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{value}{get_currency_symbol(currency)}"
