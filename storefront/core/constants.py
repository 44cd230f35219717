"""Storage keys, endpoints and timing constants.

Centralizes the names shared between the cart store, the locale resolver
and the views so a rename happens in one place.
"""

# ============== PERSISTENT STORE KEYS ==============
CART_KEY = "cart"
LANGUAGE_KEY = "language"
CURRENCY_KEY = "currency"
AUTH_TOKEN_KEY = "auth-token"

# ============== REMOTE CART GATEWAY ==============
ADD_TO_CART_PATH = "/addtocart"
REMOVE_FROM_CART_PATH = "/removefromcart"
REMOVE_ALL_PATH = "/removeAll"
GET_CART_PATH = "/getcart"
AUTH_HEADER = "auth-token"

# ============== LOCALE DETECTION ==============
LOCALE_PRIMARY_PATH = "/api/locale"
LOCALE_FALLBACK_PATH = "/locale"
LOCALE_TIMEOUT_MS = 900
ISRAEL_TIMEZONE = "Asia/Jerusalem"

# ============== DISCOUNTS ==============
DISCOUNT_SETTINGS_PATH = "/discount-settings"
DISCOUNT_CACHE_SECONDS = 300  # 5 minutes
DEFAULT_DISCOUNT_LABEL = "Discount"

# ============== CATALOG ==============
ALL_PRODUCTS_PATH = "/allproducts"

# ============== EVENTS ==============
CURRENCY_CHANGED = "currency-changed"
LANGUAGE_CHANGED = "language-changed"
DEFAULT_OPTION = "default"
