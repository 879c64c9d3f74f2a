LOOKUP_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_RENTAL_DURATION = 3

SHIFT_KEY = "kasir-rental:active-shift"
