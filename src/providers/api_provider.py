"""HTTP catalog provider for a remote supermarket catalog service.

Endpoints used (JSON bodies in the same shape as the local catalog file)::

    GET {base_url}/supermarkets/{id}/search?q=<term>&limit=<n>
        -> {"products": [{"id": ..., "name": ..., "price_cents": ..., ...}]}
    GET {base_url}/supermarkets/{id}/products?category=<key>&limit=<n>
        -> {"products": [...]}
    GET {base_url}/supermarkets/{id}
        -> {"id": ..., "delivery": {"available": true, "cost_cents": 499}}

DESIGN DECISIONS:
- One request per search term; results deduplicated by product id in term order
- Timeouts, connection failures and non-200 responses all become
  CatalogUnavailableError (the matcher folds those into not_found matches)
- A 404 on search means "store unknown", which is also an outage for that store
- Malformed product records are skipped and logged, never fatal; a body that
  is not a JSON object is an outage
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import requests

from src.data_layer.catalog_db import parse_delivery, parse_product
from src.data_layer.exceptions import CatalogUnavailableError
from src.data_layer.models import DeliveryInfo, Product
from src.providers.catalog_provider import CatalogLookup


log = logging.getLogger("providers.api_provider")


class APICatalogProvider(CatalogLookup):
    """Provider that queries a catalog service over HTTP.

    Usage::

        provider = APICatalogProvider.from_env()  # reads CATALOG_API_URL
        products = provider.search(["pechuga de pollo"], "mercadona")
    """

    DEFAULT_TIMEOUT = 10
    DEFAULT_LIMIT = 20

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        limit: int = DEFAULT_LIMIT,
    ):
        """Initialize the provider.

        Args:
            base_url: Root URL of the catalog service
            api_key: Optional bearer token
            timeout: Per-request timeout in seconds
            limit: Maximum products requested per search term

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url or not base_url.strip():
            raise ValueError("Catalog base URL is required")
        self.base_url = base_url.strip().rstrip("/")
        self.api_key = api_key.strip() if api_key else None
        self.timeout = timeout
        self.limit = limit

    @classmethod
    def from_env(
        cls,
        url_var: str = "CATALOG_API_URL",
        key_var: str = "CATALOG_API_KEY",
    ) -> "APICatalogProvider":
        """Create provider from environment variables.

        Raises:
            ValueError: If the URL variable is not set
        """
        base_url = os.environ.get(url_var)
        if not base_url:
            raise ValueError(f"Environment variable {url_var} not set")
        return cls(base_url=base_url, api_key=os.environ.get(key_var))

    def search(self, terms: Sequence[str], supermarket_id: str) -> List[Product]:
        seen = set()
        products: List[Product] = []
        for term in terms:
            if not term or not term.strip():
                continue
            data = self._make_request(
                f"/supermarkets/{supermarket_id}/search",
                supermarket_id,
                "search",
                params={"q": term, "limit": self.limit},
            )
            for product in self._parse_products(data, supermarket_id, "search"):
                if product.id not in seen:
                    seen.add(product.id)
                    products.append(product)
        return products

    def search_category(
        self, category: str, supermarket_id: str, limit: int = 20
    ) -> List[Product]:
        data = self._make_request(
            f"/supermarkets/{supermarket_id}/products",
            supermarket_id,
            "search_category",
            params={"category": category, "limit": limit},
        )
        return self._parse_products(data, supermarket_id, "search_category")[:limit]

    def get_delivery_info(self, supermarket_id: str) -> DeliveryInfo:
        data = self._make_request(
            f"/supermarkets/{supermarket_id}", supermarket_id, "get_delivery_info"
        )
        try:
            return parse_delivery(data)
        except (AttributeError, TypeError, ValueError):
            raise CatalogUnavailableError(
                supermarket_id, "get_delivery_info", detail="unexpected response body"
            )

    def _parse_products(
        self, data: Dict[str, Any], supermarket_id: str, operation: str
    ) -> List[Product]:
        records = data.get("products") or []
        if not isinstance(records, list):
            raise CatalogUnavailableError(
                supermarket_id, operation, detail="unexpected response body"
            )
        parsed = (self._parse_record(record, supermarket_id) for record in records)
        return [product for product in parsed if product is not None]

    def _parse_record(self, record: Dict[str, Any], supermarket_id: str) -> Optional[Product]:
        try:
            record = dict(record)
            record.setdefault("supermarket_id", supermarket_id)
            return parse_product(record)
        except (KeyError, TypeError, ValueError) as e:
            log.warning("Skipping malformed product from %s: %s", supermarket_id, e)
            return None

    def _make_request(
        self,
        path: str,
        supermarket_id: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """GET a catalog endpoint and return the parsed JSON body.

        Raises:
            CatalogUnavailableError: If the request fails for any reason
        """
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = requests.get(
                f"{self.base_url}{path}",
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise CatalogUnavailableError(supermarket_id, operation, timeout=True)
        except requests.exceptions.ConnectionError:
            raise CatalogUnavailableError(
                supermarket_id, operation, detail="connection failed"
            )
        except requests.exceptions.RequestException as e:
            raise CatalogUnavailableError(supermarket_id, operation, detail=str(e))

        if response.status_code != 200:
            raise CatalogUnavailableError(
                supermarket_id, operation, status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise CatalogUnavailableError(
                supermarket_id, operation, detail="invalid JSON response"
            )
        if not isinstance(data, dict):
            raise CatalogUnavailableError(
                supermarket_id, operation, detail="unexpected response body"
            )
        return data
