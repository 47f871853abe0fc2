CURRENCIES = {
    "USD": ("US Dollar", "$"),
    "EUR": ("Euro", "€"),
    "GBP": ("British Pound", "£"),
    "JPY": ("Japanese Yen", "¥"),
    "CHF": ("Swiss Franc", "CHF"),
    "CAD": ("Canadian Dollar", "CA$"),
    "AUD": ("Australian Dollar", "A$"),
    "CNY": ("Chinese Yuan", "CN¥"),
    "PLN": ("Polish Zloty", "zł"),
    "CZK": ("Czech Koruna", "Kč"),
    "SEK": ("Swedish Krona", "kr"),
    "NOK": ("Norwegian Krone", "kr"),
    "UAH": ("Ukrainian Hryvnia", "₴"),
    "RUB": ("Russian Ruble", "₽"),
    "TRY": ("Turkish Lira", "₺"),
    "INR": ("Indian Rupee", "₹"),
}

DEFAULT_CURRENCY = "USD"


def is_known_currency(code: str) -> bool:
    return code in CURRENCIES


def format_amount(value: float) -> str:
    """Format a number with a space grouping separator and a comma decimal, e.g. '1 234,56'."""
    return f"{value:,.2f}".replace(",", " ").replace(".", ",")


def format_currency(value: float, currency: str = DEFAULT_CURRENCY) -> str:
    """Format value followed by the currency code, e.g. '1 234,56 USD'."""
    return f"{format_amount(value)} {currency}"


def parse_amount(text: str) -> float:
    """Parse user input like '1 234,56' or '1234.56'. Raises ValueError."""
    cleaned = text.replace(" ", "").replace(" ", "").replace(",", ".")
    if not cleaned:
        raise ValueError("Value cannot be empty.")
    return float(cleaned)
