"""Catalog database for loading supermarket product snapshots from JSON.

Expected file shape::

    {
        "supermarkets": [
            {"id": "mercadona", "name": "Mercadona",
             "delivery": {"available": true, "cost_cents": 725}}
        ],
        "products": [
            {"id": "m-001", "name": "Pechuga de pollo", "price_cents": 450,
             "unit": "g", "package_quantity": 500, "category": "meat",
             "supermarket_id": "mercadona", "in_stock": true}
        ]
    }
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.data_layer.models import DeliveryInfo, Product
from src.ingestion.spanish_ingredients import CATEGORY_TRANSLATIONS
from src.matching.similarity import fold_text
from src.units.unit_converter import parse_unit


def parse_product(product_data: Dict[str, Any]) -> Product:
    """Parse a single product from dictionary data.

    Raises:
        ValueError: If the unit is not recognised or the price is negative
        KeyError: If a required field is missing
    """
    unit = parse_unit(product_data.get("unit", "piece"))
    if unit is None:
        raise ValueError(
            f"Product '{product_data.get('id')}' has unknown unit '{product_data.get('unit')}'"
        )

    price_cents = int(product_data["price_cents"])
    if price_cents < 0:
        raise ValueError(f"Product '{product_data['id']}' has a negative price")

    return Product(
        id=str(product_data["id"]),
        name=product_data["name"],
        price_cents=price_cents,
        unit=unit,
        package_quantity=float(product_data.get("package_quantity", 1)),
        category=product_data.get("category", "other"),
        supermarket_id=product_data["supermarket_id"],
        in_stock=bool(product_data.get("in_stock", True)),
        brand=product_data.get("brand"),
    )


def parse_delivery(store_data: Dict[str, Any]) -> DeliveryInfo:
    """Delivery metadata from a supermarket record (missing block = no delivery)."""
    delivery = store_data.get("delivery") or {}
    cost = delivery.get("cost_cents")
    return DeliveryInfo(
        available=bool(delivery.get("available", False)),
        cost_cents=int(cost) if cost is not None else None,
    )


class CatalogDB:
    """In-memory catalog snapshot loaded from a JSON file."""

    def __init__(self, json_path: str):
        """Initialize catalog database from JSON file.

        Args:
            json_path: Path to JSON file containing supermarkets and products
        """
        self.json_path = Path(json_path)
        self._supermarkets: Dict[str, Dict[str, Any]] = {}
        self._products: Dict[str, List[Product]] = {}
        self._load_catalog()

    def _load_catalog(self):
        """Load supermarkets and products from JSON file."""
        with open(self.json_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for store_data in data.get("supermarkets", []):
            self._supermarkets[store_data["id"]] = store_data
            self._products.setdefault(store_data["id"], [])

        for product_data in data.get("products", []):
            product = parse_product(product_data)
            # Stores only referenced by products still exist
            self._products.setdefault(product.supermarket_id, []).append(product)
            self._supermarkets.setdefault(product.supermarket_id, {"id": product.supermarket_id})

    def has_supermarket(self, supermarket_id: str) -> bool:
        return supermarket_id in self._supermarkets

    def get_supermarket_ids(self) -> List[str]:
        """All supermarket ids, in file order."""
        return list(self._supermarkets)

    def get_products(self, supermarket_id: str) -> List[Product]:
        """All products of one supermarket (empty list if unknown)."""
        return list(self._products.get(supermarket_id, []))

    def search(self, term: str, supermarket_id: str) -> List[Product]:
        """Products whose name contains the term, ignoring case and accents.

        Args:
            term: Search text
            supermarket_id: Store to search

        Returns:
            Matching products in catalog order
        """
        needle = fold_text(term)
        if not needle:
            return []
        return [
            product for product in self._products.get(supermarket_id, [])
            if needle in fold_text(product.name)
        ]

    def get_products_by_category(self, category: str, supermarket_id: str) -> List[Product]:
        """Products filed under a category key ("meat") or one of its Spanish
        aisle names ("carnes", "carniceria"), in catalog order."""
        names = {fold_text(category)}
        names.update(fold_text(name) for name in CATEGORY_TRANSLATIONS.get(category, ()))
        return [
            product for product in self._products.get(supermarket_id, [])
            if fold_text(product.category) in names
        ]

    def get_delivery_info(self, supermarket_id: str) -> Optional[DeliveryInfo]:
        """Delivery metadata for a store, or None if the store is unknown."""
        store = self._supermarkets.get(supermarket_id)
        if store is None:
            return None
        return parse_delivery(store)
