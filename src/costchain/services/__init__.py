"""Services package - business logic layer for Cost Chain.

Architecture:
- Services: stateless functions organized by concern
- Transactions: managed via session_scope(); every public function accepts an
  optional ``session`` to join the caller's transaction
- Exceptions: consistent error handling via the ServiceError hierarchy

Cost engine, bottom-up:
- cost_data_service: raw record reads, line cost sums, affected-entity lookups
- cost_graph: explicit dependency graph and transitive traversal
- ingredient_cost_updater / packaging_cost_updater: usage line costs
- cost_calculator: recipe and product aggregates with cascade
- bulk_recalculation_service: every aggregate, per-entity error isolation
- cost_update_service: chain entry points

Authoring:
- catalog_service: ingredients, packaging and price edits
- recipe_service: recipes and their ingredient lines
- product_service: products, their recipe items and packaging
"""

from .cost_update_service import (
    recalculate_all_costs,
    recalculate_ingredient_chain,
    recalculate_packaging_chain,
)
from .cost_data_service import fetch_ingredients, fetch_packaging
from .dto import UpdateAllResult, UpdateChainResult

__all__ = [
    "recalculate_all_costs",
    "recalculate_ingredient_chain",
    "recalculate_packaging_chain",
    "fetch_ingredients",
    "fetch_packaging",
    "UpdateAllResult",
    "UpdateChainResult",
]
