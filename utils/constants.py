APP_NAME = "SpenderPlus"
DB_FILE = "spenderplus.db"

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

DEFAULT_OVERALL_BUDGET = 2000.0
DEFAULT_CURRENCY_SYMBOL = "$"

# Hard ceiling on followers generated from one recurring request
MAX_SERIES_INSTANCES = 120

# Default stop date per frequency when no end date is given
HORIZON_WEEKS = 52
HORIZON_MONTHS = 12
HORIZON_YEARS = 3

# Suggested end date, multiplied by the rule interval
DEFAULT_END_WEEKS = 12
DEFAULT_END_MONTHS = 12
DEFAULT_END_YEARS = 3

CATEGORY_TYPES = ["income", "expense"]
FALLBACK_COLOR_HEX = "#6B7280"
FALLBACK_ICON = "circle"

DEFAULT_CATEGORIES = [
    {"name": "Dining",        "type": "expense", "icon": "fork.knife",     "color_hex": "#F59E0B"},
    {"name": "Transport",     "type": "expense", "icon": "car",            "color_hex": "#3B82F6"},
    {"name": "Bills",         "type": "expense", "icon": "bolt",           "color_hex": "#EF4444"},
    {"name": "Income",        "type": "income",  "icon": "banknote",       "color_hex": "#22C55E"},
    {"name": "Entertainment", "type": "expense", "icon": "gamecontroller", "color_hex": "#A855F7"},
    {"name": "Shopping",      "type": "expense", "icon": "bag",            "color_hex": "#E879F9"},
]

RECURRENCE_PRESETS = ["weekly", "biweekly", "monthly", "yearly", "custom"]
