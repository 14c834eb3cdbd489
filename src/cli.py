#!/usr/bin/env python3
"""Command-line interface for the grocery matching and optimization engine."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from src.data_layer.catalog_db import CatalogDB
from src.data_layer.exceptions import GroceryEngineError, InvalidInputError
from src.data_layer.models import GroceryItem
from src.data_layer.settings import EngineSettings, SettingsLoader, configure_logging
from src.grocery.aggregator import GroceryListAggregator, IngredientLine
from src.matching.product_matcher import ProductMatcher
from src.optimization.grocery_optimizer import GroceryOptimizer
from src.output.formatters import (
    format_comparisons_json,
    format_comparisons_markdown,
    format_json_string,
    format_match_json,
    format_matches_markdown,
    format_result_json,
    format_result_markdown,
)
from src.providers.api_provider import APICatalogProvider
from src.providers.local_provider import LocalCatalogProvider
from src.units.unit_converter import parse_unit


log = logging.getLogger("cli")


def load_items(items_path: Path, servings: Optional[float] = None) -> List[GroceryItem]:
    """Load ingredient lines from JSON and aggregate them into grocery items.

    Expected shape::

        [{"name": "chicken breast", "quantity": 200, "unit": "g",
          "recipe": "Pollo al ajillo", "servings": 2}, ...]

    Lines are grouped by recipe, in first-seen order. When servings is given,
    every recipe that states its own servings is rescaled to that many.

    Raises:
        InvalidInputError: If a line has an unknown unit or no name, or a
            servings value is not positive
    """
    if servings is not None and servings <= 0:
        raise InvalidInputError("servings", servings, "must be positive")

    with open(items_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    recipes: Dict[str, List[IngredientLine]] = {}
    recipe_servings: Dict[str, float] = {}
    for raw in data:
        unit = parse_unit(raw.get("unit", "piece"))
        if unit is None:
            raise InvalidInputError("unit", raw.get("unit"), "unknown unit")
        if not raw.get("name"):
            raise InvalidInputError("name", raw.get("name"), "must not be empty")
        line = IngredientLine(
            name=raw["name"],
            quantity=float(raw.get("quantity", 1)),
            unit=unit,
            recipe_name=raw.get("recipe", ""),
            category=raw.get("category"),
        )
        recipes.setdefault(line.recipe_name, []).append(line)

        if raw.get("servings") is not None:
            yields = float(raw["servings"])
            if yields <= 0:
                raise InvalidInputError("servings", raw["servings"], "must be positive")
            recipe_servings.setdefault(line.recipe_name, yields)

    lines: List[IngredientLine] = []
    for recipe_name, recipe_lines in recipes.items():
        if servings is not None and recipe_name in recipe_servings:
            recipe_lines = GroceryListAggregator.scale(
                recipe_lines, servings, recipe_servings[recipe_name]
            )
        lines.extend(recipe_lines)

    log.debug("Loaded %d ingredient lines from %d recipes", len(lines), len(recipes))
    return GroceryListAggregator().aggregate(lines)


def parse_stores(raw: Optional[str], catalog_db: Optional[CatalogDB]) -> List[str]:
    """Comma-separated store ids, or every store in the local catalog."""
    if raw:
        return [s.strip() for s in raw.split(",") if s.strip()]
    if catalog_db is not None:
        return catalog_db.get_supermarket_ids()
    return []


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Match recipe ingredients to supermarket products and optimize the shopping list"
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default="data/catalog/catalog.json",
        help="Path to catalog JSON file (default: data/catalog/catalog.json)"
    )
    parser.add_argument(
        "--catalog-source",
        choices=["local", "api"],
        default="local",
        help="Catalog source: local JSON file (default) or remote service (CATALOG_API_URL)"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Optional engine settings YAML (see config/engine.yaml.example)"
    )
    parser.add_argument(
        "--output",
        choices=["markdown", "json"],
        default="markdown",
        help="Output format: markdown (default) or json"
    )
    parser.add_argument(
        "--output-file",
        type=str,
        help="Optional file path to save output (default: print to stdout)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    match_parser = subparsers.add_parser("match", help="Rank products for one ingredient at one store")
    match_parser.add_argument("ingredient", help="Ingredient name, English or Spanish")
    match_parser.add_argument("quantity", type=float, help="Quantity needed")
    match_parser.add_argument("unit", help="Unit of quantity (g, kg, ml, l, cup, piece, ...)")
    match_parser.add_argument("--store", required=True, help="Supermarket id")

    optimize_parser = subparsers.add_parser("optimize", help="Optimize a grocery list across stores")
    optimize_parser.add_argument("--items", required=True, help="Path to ingredient lines JSON")
    optimize_parser.add_argument("--stores", help="Comma-separated supermarket ids (default: all)")
    optimize_parser.add_argument(
        "--servings", type=float, help="Rescale every recipe that states its servings to this many"
    )
    optimize_parser.add_argument(
        "--strategy",
        choices=["price", "availability"],
        default="price",
        help="Optimize for lowest price (default) or best availability"
    )

    compare_parser = subparsers.add_parser("compare", help="Compare whole-basket cost per store")
    compare_parser.add_argument("--items", required=True, help="Path to ingredient lines JSON")
    compare_parser.add_argument("--stores", help="Comma-separated supermarket ids (default: all)")
    compare_parser.add_argument(
        "--servings", type=float, help="Rescale every recipe that states its servings to this many"
    )

    return parser


def write_output(text: str, output_file: Optional[str]) -> None:
    if output_file:
        output_path = Path(output_file)
        output_path.write_text(text, encoding="utf-8")
        print(f"Output saved to {output_path}", file=sys.stderr)
    else:
        print(text)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = EngineSettings()
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            print(f"Hint: Copy config/engine.yaml.example to {config_path} and customize it", file=sys.stderr)
            return 1
        settings = SettingsLoader(str(config_path)).load()
    configure_logging(settings.log_level)

    catalog_db = None
    if args.catalog_source == "api":
        try:
            catalog = APICatalogProvider.from_env()
        except ValueError as e:
            print("Failed to initialize catalog API:", file=sys.stderr)
            print(str(e), file=sys.stderr)
            return 3
    else:
        catalog_path = Path(args.catalog)
        if not catalog_path.exists():
            print(f"Error: Catalog file not found: {catalog_path}", file=sys.stderr)
            return 1
        catalog_db = CatalogDB(str(catalog_path))
        catalog = LocalCatalogProvider(catalog_db)

    matcher = ProductMatcher(catalog, config=settings.matcher)
    optimizer = GroceryOptimizer(matcher, catalog, config=settings.optimizer)
    as_json = args.output == "json"

    try:
        if args.command == "match":
            matches = matcher.find_matches(args.ingredient, args.quantity, args.unit, args.store)
            text = (
                format_json_string([format_match_json(m) for m in matches])
                if as_json else format_matches_markdown(matches)
            )

        else:
            items_path = Path(args.items)
            if not items_path.exists():
                print(f"Error: Items file not found: {items_path}", file=sys.stderr)
                return 1
            items = load_items(items_path, args.servings)
            stores = parse_stores(args.stores, catalog_db)
            log.info("Loaded %d grocery items, %d stores", len(items), len(stores))

            if args.command == "compare":
                comparisons = optimizer.find_best_supermarket(items, stores)
                include_delivery = settings.optimizer.include_delivery_costs
                text = (
                    format_json_string(format_comparisons_json(comparisons, include_delivery))
                    if as_json
                    else format_comparisons_markdown(comparisons, include_delivery, len(items))
                )
            else:
                if args.strategy == "availability":
                    result = optimizer.optimize_for_availability(items, stores)
                else:
                    result = optimizer.optimize_for_price(items, stores)
                text = (
                    format_json_string(format_result_json(result))
                    if as_json else format_result_markdown(result)
                )

    except GroceryEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    write_output(text, args.output_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
