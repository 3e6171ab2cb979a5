import logging
import httpx
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from florist_cart.core.config import settings
from florist_cart.schemas.cart import ProductSnapshot
from florist_cart.schemas.common import decimal_to_number
from florist_cart.schemas.voucher import Voucher

logger = logging.getLogger(__name__)


class BackendAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or response.text
    return response.text


class StorefrontClient:
    """HTTP client for the storefront backend: catalog snapshots and voucher validation."""

    def __init__(
        self,
        base_url: str = None,
        asset_base_url: str = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.asset_base_url = (asset_base_url or settings.ASSET_BASE_URL).rstrip("/")
        self.transport = transport
        self.client = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=30.0, transport=self.transport)
        return self.client

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        client = await self._get_client()
        try:
            response = await client.request(method, f"{self.base_url}{path}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"{method} {path} failed with status {e.response.status_code}: {message}")
            raise BackendAPIError(message, e.response.status_code)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise BackendAPIError(f"Backend unavailable: {str(e)}")

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise BackendAPIError(f"Invalid response from {path}", response.status_code)
        if not body.get("success"):
            message = body.get("error") or "Request was not successful"
            logger.warning(f"{method} {path} rejected: {message}")
            raise BackendAPIError(message, response.status_code)
        return body.get("data") or {}

    async def get_product(self, product_id: str) -> ProductSnapshot:
        """
        Fetch a product and reduce it to the snapshot the cart stores.

        GET /products/{id}
        Returns: {"success": true, "data": {"id": "...", "name": "...", "price": 150000,
                  "stock": 5, "category": "Bouquet", "images": ["/uploads/products/a.jpg"]}}
        """
        data = await self._request("GET", f"/products/{product_id}")
        images = data.get("images") or []
        image = f"{self.asset_base_url}{images[0]}" if images else settings.PLACEHOLDER_IMAGE

        try:
            product = ProductSnapshot(
                id=data["id"],
                name=data["name"],
                price=data["price"],
                image=image,
                category=data.get("category") or "",
                stock=data.get("stock") or 0
            )
        except (KeyError, ValidationError) as e:
            logger.error(f"Invalid product data for {product_id}: {str(e)}")
            raise BackendAPIError(f"Invalid product data for {product_id}")

        logger.info(f"Fetched product {product_id} from backend")
        return product

    async def validate_voucher(
        self,
        code: str,
        cart_total: Decimal,
        user_id: Optional[str] = None
    ) -> Voucher:
        """
        Validate a voucher code against the current cart total.

        POST /vouchers/validate
        {"code": "FLOWER10", "cartTotal": 250000, "userId": "..."}

        Returns: {"success": true, "data": {"voucher": {"id": "...", "code": "FLOWER10",
                  "type": "PERCENTAGE", "discount": 10, "maxDiscount": 20000, ...}}}
        """
        payload = {
            "code": code.strip().upper(),
            "cartTotal": decimal_to_number(Decimal(str(cart_total)))
        }
        if user_id:
            payload["userId"] = user_id

        logger.info(f"Validating voucher {payload['code']} for cart total {payload['cartTotal']}")
        data = await self._request("POST", "/vouchers/validate", json=payload)
        voucher = data.get("voucher")
        if not voucher:
            raise BackendAPIError("Voucher tidak valid")
        try:
            return Voucher.model_validate(voucher)
        except ValidationError as e:
            logger.error(f"Invalid voucher data for {payload['code']}: {str(e)}")
            raise BackendAPIError("Voucher tidak valid")

    async def close(self):
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None
