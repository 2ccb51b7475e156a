APP_NAME = "Expense Manager"
APP_WIDTH = 520
APP_HEIGHT = 820
DB_FILE = "expenses.db"
DB_SCHEMA_VERSION = 2

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"
TIME_FORMAT = "%H:%M"

PAYMENT_METHODS = ("DEBIT", "CREDIT")
PAYMENT_METHOD_LABELS = {
    "DEBIT": "Debit",
    "CREDIT": "Credit",
}

BACKUP_VERSION = 1
BACKUP_FILENAME_PREFIX = "ExpenseManager"

BUDGET_WARNING_THRESHOLD = 0.75  # summary turns orange above 75%

DEFAULT_SETTINGS = {
    "appearance_mode": "system",
    "currency_symbol": "$",
    "last_month": "",
}

STATUS_COLORS = {
    "ok":      "#10B981",
    "warning": "#F97316",
    "over":    "#EF4444",
}
