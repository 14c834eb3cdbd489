"""Output formatting for matches, shopping lists and store comparisons."""

from src.output.formatters import (
    explain_match,
    format_price,
    format_price_per_unit,
    format_quantity,
    format_match_json,
    format_result_json,
    format_comparisons_json,
    format_json_string,
    format_matches_markdown,
    format_result_markdown,
    format_comparisons_markdown,
)

__all__ = [
    "explain_match",
    "format_price",
    "format_price_per_unit",
    "format_quantity",
    "format_match_json",
    "format_result_json",
    "format_comparisons_json",
    "format_json_string",
    "format_matches_markdown",
    "format_result_markdown",
    "format_comparisons_markdown",
]
