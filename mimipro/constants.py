# mimipro/constants.py
APP_NAME = "MimiPro Admin"
APP_VERSION = "1.0.0"

# ---- Storage ----
DATA_DIR = "data"
DB_FILE_NAME = "mimipro.db"
LOG_DIR = "logs"
LOG_FILE_NAME = "mimipro.log"
SCHEMA_VERSION = "2"
TABLE_SCHEMA_VERSION = "schema_version"

# Collection names (one sqlite table each)
STORE_PRODUCTS = "products"
STORE_STOCK = "stock"
STORE_HISTORY = "history"
STORE_STOCK_HISTORY = "stock_history"
STORE_SYNC_STATUS = "sync_status"

# ---- Money ----
CURRENCY_SYMBOL = "৳"

# Cash notes counted at settlement, largest first
CASH_NOTES = (1000, 500, 200, 100, 50, 20, 10, 5, 2, 1)

# ---- Stock ----
LOW_STOCK_THRESHOLD = 50
STOCK_STATUS_OUT = "Out of Stock"
STOCK_STATUS_LOW = "Low Stock"
STOCK_STATUS_NORMAL = "Normal"

MANUAL_RESTOCK_REASON = "Manual restock"
DELIVERY_REASON = "Delivery to {customer}"
DELIVERY_EDIT_REASON = "Delivery to {customer} (edited)"
RETRY_REASON_SUFFIX = " (retry)"

# When a saved delivery is edited, re-apply the sold-quantity delta to stock.
# False keeps the historical behaviour: edits never touch stock.
RECONCILE_STOCK_ON_UPDATE = False

# ---- Sync ----
SYNC_PENDING = "pending"
SYNC_SYNCED = "synced"
SYNC_CHECK_INTERVAL_MS = 30_000

# ---- Delivery modes ----
MODE_CREATE = "create"
MODE_UPDATE = "update"
