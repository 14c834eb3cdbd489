"""FastAPI server for the grocery matching and optimization engine."""

import os
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from src.data_layer.catalog_db import CatalogDB
from src.data_layer.exceptions import InvalidInputError
from src.data_layer.models import GroceryItem
from src.data_layer.settings import EngineSettings, SettingsLoader
from src.grocery.aggregator import GroceryListAggregator, IngredientLine
from src.matching.product_matcher import ProductMatcher
from src.optimization.grocery_optimizer import GroceryOptimizer
from src.output.formatters import (
    format_comparisons_json,
    format_match_json,
    format_result_json,
)
from src.providers.local_provider import LocalCatalogProvider
from src.units.unit_converter import parse_unit


catalog_path = os.getenv("CATALOG_PATH", "data/catalog/catalog.json")
settings_path = os.getenv("ENGINE_CONFIG")

app = FastAPI(title="Grocery Optimizer API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class MatchRequest(BaseModel):
    ingredient_name: str
    quantity: float
    unit: str
    supermarket_id: str


class ItemRequest(BaseModel):
    name: str
    quantity: float
    unit: str = "piece"
    category: Optional[str] = None


class GroceryListRequest(BaseModel):
    items: List[ItemRequest]
    supermarket_ids: List[str] = Field(default_factory=list)


def _load_settings() -> EngineSettings:
    if settings_path:
        return SettingsLoader(settings_path).load()
    return EngineSettings()


def _build_engine():
    settings = _load_settings()
    catalog_db = CatalogDB(catalog_path)
    catalog = LocalCatalogProvider(catalog_db)
    matcher = ProductMatcher(catalog, config=settings.matcher)
    optimizer = GroceryOptimizer(matcher, catalog, config=settings.optimizer)
    return settings, catalog_db, matcher, optimizer


def _to_items(request: GroceryListRequest) -> List[GroceryItem]:
    lines = []
    for item in request.items:
        unit = parse_unit(item.unit)
        if unit is None:
            raise InvalidInputError("unit", item.unit, "unknown unit")
        lines.append(IngredientLine(
            name=item.name, quantity=item.quantity, unit=unit, category=item.category
        ))
    return GroceryListAggregator().aggregate(lines)


@app.post("/api/match")
def find_matches(request: MatchRequest) -> List[Dict[str, Any]]:
    try:
        _, _, matcher, _ = _build_engine()
        matches = matcher.find_matches(
            request.ingredient_name, request.quantity, request.unit, request.supermarket_id
        )
        return [format_match_json(m) for m in matches]
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/api/optimize/price")
def optimize_for_price(request: GroceryListRequest) -> Dict[str, Any]:
    try:
        _, catalog_db, _, optimizer = _build_engine()
        stores = request.supermarket_ids or catalog_db.get_supermarket_ids()
        result = optimizer.optimize_for_price(_to_items(request), stores)
        return format_result_json(result)
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/api/optimize/availability")
def optimize_for_availability(request: GroceryListRequest) -> Dict[str, Any]:
    try:
        _, catalog_db, _, optimizer = _build_engine()
        stores = request.supermarket_ids or catalog_db.get_supermarket_ids()
        result = optimizer.optimize_for_availability(_to_items(request), stores)
        return format_result_json(result)
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/api/compare")
def find_best_supermarket(request: GroceryListRequest) -> List[Dict[str, Any]]:
    try:
        settings, catalog_db, _, optimizer = _build_engine()
        stores = request.supermarket_ids or catalog_db.get_supermarket_ids()
        comparisons = optimizer.find_best_supermarket(_to_items(request), stores)
        return format_comparisons_json(comparisons, settings.optimizer.include_delivery_costs)
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.get("/api/supermarkets")
def list_supermarkets() -> List[str]:
    try:
        return CatalogDB(catalog_path).get_supermarket_ids()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
