"""Formatters for matching and optimization output (JSON and Markdown)."""

import json
from typing import Any, Dict, List, Optional, Sequence

from src.data_layer.models import (
    GroceryItem,
    MatchType,
    OptimizationResult,
    Product,
    PricePerUnit,
    ProductMatch,
    SupermarketComparison,
    Unit,
)


CURRENCY_SYMBOLS = {
    "EUR": "€",
    "GBP": "£",
    "USD": "$",
}


def format_price(price_cents: int, currency: str = "EUR") -> str:
    """Format a price in cents for display (e.g., 450 -> "€4.50").

    Args:
        price_cents: Amount in minor currency units
        currency: ISO currency code (EUR, GBP, USD)

    Returns:
        Formatted string; negative amounts get a leading "-"
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    sign = "-" if price_cents < 0 else ""
    return f"{sign}{symbol}{abs(price_cents) / 100:.2f}"


def format_quantity(quantity: float, unit: Unit) -> str:
    """Format a quantity with its unit (e.g., "500 g", "1.5 l", "to taste")."""
    if unit == Unit.TO_TASTE:
        return "to taste"

    # Remove .0 if whole number
    if quantity == int(quantity):
        qty_str = str(int(quantity))
    else:
        qty_str = f"{quantity:.2f}".rstrip('0').rstrip('.')
    return f"{qty_str} {unit.value}"


def format_price_per_unit(price_per_unit: Optional[PricePerUnit], currency: str = "EUR") -> str:
    """Format a unit price (e.g., "€9.00/kg"); "n/a" when there is none."""
    if price_per_unit is None:
        return "n/a"
    return f"{format_price(price_per_unit.price_cents, currency)}/{price_per_unit.unit.value}"


def explain_match(match: ProductMatch) -> str:
    """Human-readable explanation of a single match.

    Args:
        match: ProductMatch to explain

    Returns:
        One paragraph describing what was matched, how confidently, how many
        packages to buy, and whether a cheaper alternative exists
    """
    if match.match_type == MatchType.NOT_FOUND:
        return (
            f'Could not find a product matching "{match.ingredient_name}". '
            "You may need to find this item manually or try a different supermarket."
        )

    product = match.product
    confidence_percent = round(match.confidence * 100)
    explanation = (
        f'Matched "{match.ingredient_name}" to "{product.name}" '
        f"with {confidence_percent}% confidence."
    )

    if match.match_type == MatchType.EXACT:
        explanation += " This is an excellent match for your ingredient."
    elif match.match_type == MatchType.SIMILAR:
        explanation += " This is a similar product from a different brand or size."
    elif match.match_type == MatchType.PARTIAL:
        explanation += " The product name contains your ingredient; check it is the right item."
    elif match.match_type == MatchType.SUBSTITUTE:
        explanation += " This is a substitute product that should work for your recipe."

    package = format_quantity(product.package_quantity, product.unit)
    if match.quantity_to_buy > 1:
        explanation += f" You'll need {match.quantity_to_buy} packages ({package} each)."
    else:
        explanation += f" One package of {package} should be sufficient."

    cheaper = [alt for alt in match.alternatives if alt.price_difference_cents < 0]
    if cheaper:
        explanation += (
            f" Cheaper alternative available "
            f"(save {format_price(abs(cheaper[0].price_difference_cents))})."
        )

    return explanation


# ============================================================================
# JSON
# ============================================================================

def format_product_json(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "price_cents": product.price_cents,
        "unit": product.unit.value,
        "package_quantity": product.package_quantity,
        "category": product.category,
        "supermarket_id": product.supermarket_id,
        "in_stock": product.in_stock,
    }


def format_match_json(match: ProductMatch) -> Dict[str, Any]:
    """Format a ProductMatch as a JSON-ready dictionary."""
    return {
        "ingredient_name": match.ingredient_name,
        "quantity_needed": match.quantity_needed,
        "unit_needed": match.unit_needed.value,
        "supermarket_id": match.supermarket_id,
        "product": format_product_json(match.product) if match.product else None,
        "confidence": round(match.confidence, 3),
        "quantity_to_buy": match.quantity_to_buy,
        "total_cost_cents": match.total_cost_cents,
        "match_type": match.match_type.value,
        "match_reason": match.match_reason,
        "price_per_unit": (
            {
                "price_cents": match.price_per_unit.price_cents,
                "unit": match.price_per_unit.unit.value,
            }
            if match.price_per_unit else None
        ),
        "alternatives": [
            {
                "product": format_product_json(alt.product),
                "confidence": round(alt.confidence, 3),
                "reason": alt.reason,
                "price_difference_cents": alt.price_difference_cents,
            }
            for alt in match.alternatives
        ],
    }


def format_item_json(item: GroceryItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "ingredient_name": item.ingredient_name,
        "total_quantity": item.total_quantity,
        "unit": item.unit.value,
        "category": item.category,
        "selected_match": (
            format_match_json(item.selected_match) if item.selected_match else None
        ),
    }


def format_result_json(result: OptimizationResult) -> Dict[str, Any]:
    """Format an OptimizationResult as JSON (for API and CLI usage)."""
    return {
        "items": [format_item_json(item) for item in result.items],
        "total_cost_cents": result.total_cost_cents,
        "savings_cents": result.savings_cents,
        "supermarkets": list(result.supermarkets),
        "unavailable_items": list(result.unavailable_items),
        "suggestions": list(result.suggestions),
    }


def format_comparisons_json(
    comparisons: Sequence[SupermarketComparison],
    include_delivery: bool = True,
) -> List[Dict[str, Any]]:
    return [
        {
            "supermarket_id": c.supermarket_id,
            "total_cost_cents": c.total_cost_cents,
            "effective_cost_cents": c.effective_cost_cents(include_delivery),
            "items_available": c.items_available,
            "items_unavailable": c.items_unavailable,
            "delivery_available": c.delivery_available,
            "delivery_cost_cents": c.delivery_cost_cents,
        }
        for c in comparisons
    ]


def format_json_string(data: Any, indent: int = 2) -> str:
    """Serialize any formatted structure to a JSON string."""
    return json.dumps(data, indent=indent, ensure_ascii=False)


# ============================================================================
# MARKDOWN
# ============================================================================

def format_matches_markdown(matches: Sequence[ProductMatch]) -> str:
    """Format the ranked matches of one ingredient as Markdown."""
    if not matches:
        return ""

    primary = matches[0]
    lines = [f"# Matches for \"{primary.ingredient_name}\" at {primary.supermarket_id}\n"]
    lines.append(explain_match(primary))
    lines.append("")

    if primary.is_available:
        lines.append("| # | Product | Type | Confidence | Packages | Cost | Unit price |")
        lines.append("|---|---------|------|------------|----------|------|------------|")
        for idx, match in enumerate(matches, 1):
            lines.append(
                f"| {idx} | {match.product.name} | {match.match_type.value} "
                f"| {match.confidence:.0%} | {match.quantity_to_buy} "
                f"| {format_price(match.total_cost_cents)} "
                f"| {format_price_per_unit(match.price_per_unit)} |"
            )
        lines.append("")

    return "\n".join(lines)


def format_result_markdown(result: OptimizationResult) -> str:
    """Format an OptimizationResult as a Markdown shopping list.

    Items are grouped by the supermarket they should be bought at.
    """
    lines = ["# Shopping List\n"]
    lines.append(f"**Total:** {format_price(result.total_cost_cents)}")
    lines.append(f"**Savings:** {format_price(result.savings_cents)}")
    if result.supermarkets:
        lines.append(f"**Supermarkets:** {', '.join(result.supermarkets)}")
    lines.append("")

    for supermarket_id in result.supermarkets:
        lines.append(f"## {supermarket_id}")
        for item in result.items:
            match = item.selected_match
            if match is None or match.supermarket_id != supermarket_id or not match.is_available:
                continue
            lines.append(
                f"- {item.ingredient_name}: {match.quantity_to_buy} x {match.product.name} "
                f"({format_price(match.total_cost_cents)})"
            )
        lines.append("")

    if result.unavailable_items:
        lines.append("## Unavailable")
        for name in result.unavailable_items:
            lines.append(f"- {name}")
        lines.append("")

    if result.suggestions:
        lines.append("## Suggestions")
        for suggestion in result.suggestions:
            lines.append(f"- {suggestion}")
        lines.append("")

    return "\n".join(lines)


def format_comparisons_markdown(
    comparisons: Sequence[SupermarketComparison],
    include_delivery: bool = True,
    item_count: Optional[int] = None,
) -> str:
    """Format a supermarket comparison table, cheapest first."""
    lines = ["# Supermarket Comparison\n"]
    if not comparisons:
        lines.append("No supermarkets to compare.")
        return "\n".join(lines)

    lines.append("| Supermarket | Basket | Delivery | Total | Available |")
    lines.append("|-------------|--------|----------|-------|-----------|")
    for c in comparisons:
        if not c.delivery_available:
            delivery = "n/a"
        elif c.delivery_cost_cents is None:
            delivery = "?"
        else:
            delivery = format_price(c.delivery_cost_cents)
        total_items = item_count if item_count is not None else c.items_available + c.items_unavailable
        lines.append(
            f"| {c.supermarket_id} | {format_price(c.total_cost_cents)} | {delivery} "
            f"| {format_price(c.effective_cost_cents(include_delivery))} "
            f"| {c.items_available}/{total_items} |"
        )
    lines.append("")
    return "\n".join(lines)
