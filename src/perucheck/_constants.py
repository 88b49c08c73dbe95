"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8000"
USER_AGENT = "perucheck/1.0"
DEFAULT_REQUEST_TIMEOUT = 60.0

# ------------------------------------------------------------------
# Query value shapes
# ------------------------------------------------------------------

PLATE_LENGTH = 6
NATIONAL_ID_LENGTH = 8

# ------------------------------------------------------------------
# Upstream payload keys
# ------------------------------------------------------------------

RAW_TEXT_KEY = "resultado_crudo"
"""Key under which upstream scrapers return the page text they captured."""

DATA_KEY = "datos"
"""Key under which upstream scrapers nest their structured fields."""

# ------------------------------------------------------------------
# Service ids with special roles
# ------------------------------------------------------------------

OWNERSHIP_SERVICE_ID = "sunarp"
IDENTITY_SERVICE_ID = "dniperu"
