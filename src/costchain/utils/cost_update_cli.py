"""
Cost Update CLI Utility

Command-line interface for the cost recalculation entry points.

Usage Examples:
    # Recalculate every line, recipe and product
    cost-chain recalculate-all

    # Propagate ingredient price changes
    cost-chain ingredient-chain 3f0c... 9a1b...

    # Propagate packaging price changes
    cost-chain packaging-chain 77de...

    # List priced inputs
    cost-chain list-ingredients
    cost-chain list-packaging

The same commands are available as ``python -m costchain.utils.cost_update_cli``.
"""

import argparse
import logging
import sys

from costchain.services.cost_data_service import fetch_ingredients, fetch_packaging
from costchain.services.cost_update_service import (
    recalculate_all_costs,
    recalculate_ingredient_chain,
    recalculate_packaging_chain,
)
from costchain.services.database import close_connections, initialize_app_database
from costchain.services.dto_utils import cost_to_string
from costchain.services.exceptions import ServiceError
from costchain.utils.constants import APP_NAME


def recalculate_all():
    """Recalculate every derived cost."""
    print("Recalculating all costs...")
    result = recalculate_all_costs()

    print(f"  Recipes updated:  {result.updated_recipes}")
    print(f"  Products updated: {result.updated_products}")

    if result.errors:
        print(f"  {len(result.errors)} error(s):")
        for error in result.errors:
            print(f"    - {error}")
        return 1
    return 0


def ingredient_chain(ingredient_ids):
    """Propagate ingredient price changes."""
    print(f"Recalculating ingredient chain for {len(ingredient_ids)} ingredient(s)...")
    result = recalculate_ingredient_chain(ingredient_ids)
    _print_chain_result(result)
    return 0


def packaging_chain(packaging_ids):
    """Propagate packaging price changes."""
    print(f"Recalculating packaging chain for {len(packaging_ids)} packaging record(s)...")
    result = recalculate_packaging_chain(packaging_ids)
    _print_chain_result(result)
    return 0


def list_ingredients():
    """Print every ingredient with its unit cost."""
    for ingredient in fetch_ingredients():
        unit = f"/{ingredient['unit']}" if ingredient["unit"] else ""
        brand = f" ({ingredient['brand']})" if ingredient["brand"] else ""
        print(
            f"{ingredient['id']}  {ingredient['name']}{brand}  "
            f"{cost_to_string(ingredient['unit_cost'])}{unit}"
        )
    return 0


def list_packaging():
    """Print every packaging record with its unit cost."""
    for packaging in fetch_packaging():
        kind = f" [{packaging['type']}]" if packaging["type"] else ""
        print(
            f"{packaging['id']}  {packaging['name']}{kind}  "
            f"{cost_to_string(packaging['unit_cost'])}"
        )
    return 0


def _print_chain_result(result):
    print(f"  Recipes affected:  {result.affected_recipes}")
    for recipe_id in result.recipe_ids:
        print(f"    - {recipe_id}")
    print(f"  Products affected: {result.affected_products}")
    for product_id in result.product_ids:
        print(f"    - {product_id}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cost-chain",
        description=f"Cost recalculation utility for {APP_NAME}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Recalculate everything:
    cost-chain recalculate-all

  After changing ingredient prices:
    cost-chain ingredient-chain <ingredient-id> [<ingredient-id> ...]

  After changing packaging prices:
    cost-chain packaging-chain <packaging-id> [<packaging-id> ...]
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every phase and row (DEBUG level)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("recalculate-all", help="Recalculate every derived cost")

    ingredient_parser = subparsers.add_parser(
        "ingredient-chain", help="Propagate ingredient price changes"
    )
    ingredient_parser.add_argument("ids", nargs="+", help="Ingredient IDs")

    packaging_parser = subparsers.add_parser(
        "packaging-chain", help="Propagate packaging price changes"
    )
    packaging_parser.add_argument("ids", nargs="+", help="Packaging IDs")

    subparsers.add_parser("list-ingredients", help="List ingredients with unit costs")
    subparsers.add_parser("list-packaging", help="List packaging with unit costs")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    initialize_app_database()

    try:
        if args.command == "recalculate-all":
            return recalculate_all()
        elif args.command == "ingredient-chain":
            return ingredient_chain(args.ids)
        elif args.command == "packaging-chain":
            return packaging_chain(args.ids)
        elif args.command == "list-ingredients":
            return list_ingredients()
        elif args.command == "list-packaging":
            return list_packaging()
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        close_connections()

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
