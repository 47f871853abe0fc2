APP_NAME = "Finance Tracker"
APP_WIDTH = 1200
APP_HEIGHT = 760
DB_FILE = "finance_tracker.db"

DATE_FORMAT = "%Y-%m-%d"
EPOCH_DATE = "1970-01-01"
BUDGET_ALERT_THRESHOLD = 0.80  # default 80%
TRANSFER_PAGE_SIZE = 50

TRANSACTION_TYPES = ["spending", "income"]
TYPE_FILTERS = ["both", "spending", "income"]
BUDGET_PERIODS = ["week", "month", "year"]
STAT_DATE_FILTERS = ["day", "week", "month", "year", "date_range", "all_time"]
SEARCH_DATE_FILTERS = ["day", "week", "month", "year", "custom"]
BAR_GROUPINGS = ["day", "week", "month", "year"]
RATE_WAYS = ["multiply", "divide"]
COLOR_SCHEMES = ["system", "light", "dark"]

TYPE_COLORS = {
    "spending": "#F44336",
    "income":   "#4CAF50",
    "profit":   "#2196F3",
}

# Named palette shared by categories, accounts and tags
PALETTE = {
    "blue":   "#2196F3",
    "yellow": "#FFC107",
    "orange": "#FF9800",
    "indigo": "#3F51B5",
    "purple": "#9C27B0",
    "red":    "#F44336",
    "mint":   "#26C6DA",
    "brown":  "#795548",
    "pink":   "#E91E63",
    "green":  "#4CAF50",
    "teal":   "#009688",
    "gray":   "#888888",
}

DEFAULT_SPENDING_CATEGORIES = [
    {"name": "Groceries",      "icon_name": "shopping-cart",        "color": "blue"},
    {"name": "Cafes",          "icon_name": "003-cutlery",          "color": "yellow"},
    {"name": "Transport",      "icon_name": "car",                  "color": "orange"},
    {"name": "Entertainments", "icon_name": "001-gamepad",          "color": "indigo"},
    {"name": "Education",      "icon_name": "016-book",             "color": "purple"},
    {"name": "Health",         "icon_name": "018-heart",            "color": "red"},
    {"name": "Gifts",          "icon_name": "031-gift",             "color": "mint"},
    {"name": "Home",           "icon_name": "home",                 "color": "brown"},
    {"name": "Family",         "icon_name": "010-love-3",           "color": "pink"},
    {"name": "Other",          "icon_name": "047-upload",           "color": "red"},
]

DEFAULT_INCOME_CATEGORIES = [
    {"name": "Salary",   "icon_name": "1-economy-004-economy", "color": "green"},
    {"name": "Interest", "icon_name": "1-economy-007-bank",    "color": "purple"},
    {"name": "Gifts",    "icon_name": "031-gift",              "color": "mint"},
    {"name": "Other",    "icon_name": "download",              "color": "green"},
]

ACCOUNT_ICONS = ["wallet", "bank", "credit-card", "cash", "piggy-bank", "safe"]

CATEGORY_ICONS = sorted(
    {c["icon_name"] for c in DEFAULT_SPENDING_CATEGORIES + DEFAULT_INCOME_CATEGORIES}
    | {"plane", "phone", "shirt", "paw", "dumbbell", "bus", "fuel", "baby"}
)

# Daily reminder notification
REMINDER_TITLE = "Finances are important"
REMINDER_BODY = "Don't forget to add your spendings"
REMINDER_DEFAULT_HOUR = 20
REMINDER_DEFAULT_MINUTE = 50

DEFAULT_TAB_ORDER = [
    "transactions", "transfers", "search", "statistics",
    "budgets", "accounts", "categories", "tags", "settings",
]

TAB_LABELS = {
    "transactions": "Transactions",
    "transfers":    "Transfers",
    "search":       "Search",
    "statistics":   "Statistics",
    "budgets":      "Budgets",
    "accounts":     "Accounts",
    "categories":   "Categories",
    "tags":         "Tags",
    "settings":     "Settings",
}

SEVERITY_COLORS = {
    "error":   "#F44336",
    "warning": "#FF9800",
    "info":    "#2196F3",
}

SEVERITY_ICONS = {
    "error":   "❗",
    "warning": "⚠",
    "info":    "ℹ",
}
