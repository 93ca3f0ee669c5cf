import os
from pathlib import Path

DEFAULT_DATA_DIR = Path(
    os.getenv("SUPPLIER_EVAL_DATA_DIR", "")
    or (Path(__file__).parent.parent.resolve() / "data")
).absolute().resolve()

# Score scale (1-5 per criterion, 0.00-5.00 total)
MIN_CRITERION_SCORE = 1
MAX_CRITERION_SCORE = 5
SCORE_DECIMALS = 2
PERCENT_FACTOR = 20  # 5.00 * 20 = 100%

# Recurring-evaluation gate: totals below 70% need an improvement plan
ACTION_PLAN_THRESHOLD = 3.5

# Per-criterion bar: criteria below 85% need a written commitment
CRITERION_COMMITMENT_THRESHOLD = 4.25

# Four-tier bands, expressed as percentages of the 0-100 scale
TIER_TOP_PERCENT = 85
TIER_MIDDLE_PERCENT = 70
TIER_LOW_PERCENT = 60

# Weight tolerances
CATALOG_WEIGHT_TOLERANCE = 0.001  # fractions, catalog columns
PERCENT_WEIGHT_TOLERANCE = 0.01  # percentage points, overrides and selection criteria

# Separator for the flat commitment text kept for legacy listings
COMMITMENT_SEPARATOR = " | "

# Notifications
WEBHOOK_URL = os.getenv("SUPPLIER_EVAL_WEBHOOK_URL", "").strip() or None
WEBHOOK_TIMEOUT = 10.0
REGISTRATION_URL = os.getenv(
    "SUPPLIER_EVAL_REGISTRATION_URL", "https://proveedores.example.com/auth/register"
)

# Storage categories (sub-directories of the data dir)
STORAGE_PROVIDERS = "providers"
STORAGE_CATEGORIES = "categories"
STORAGE_EVALUATIONS = "evaluations"
STORAGE_SELECTION_EVENTS = "selection_events"
STORAGE_LOCK_TIMEOUT = 10.0  # seconds
