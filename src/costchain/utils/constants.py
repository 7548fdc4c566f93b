"""
Constants for the Cost Chain application.

This module defines system-wide constants including:
- Application metadata
- Monetary precision used by the cost calculators
- Environment variable names
"""

from decimal import Decimal

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Cost Chain"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "cost_chain.db"
APP_DIR_NAME = "CostChain"

# ============================================================================
# Environment
# ============================================================================

ENV_VAR_ENVIRONMENT = "COSTCHAIN_ENV"
ENV_VAR_DATABASE_URL = "COSTCHAIN_DATABASE_URL"

# ============================================================================
# Cost Precision
# ============================================================================

# Derived costs are stored with 4 decimal places
COST_QUANTUM = Decimal("0.0001")

# Displayed costs are rounded to cents
DISPLAY_QUANTUM = Decimal("0.01")

# Portions used when a recipe has none recorded
DEFAULT_PORTIONS = 1

# ============================================================================
# Validation Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_BRAND_LENGTH = 200
MAX_UNIT_LENGTH = 50
MAX_TYPE_LENGTH = 100

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Please enter a valid number"
ERROR_INVALID_POSITIVE = "Value must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "Value must be zero or greater"
ERROR_INVALID_INTEGER = "Please enter a whole number"
