"""
Client side of the catalog.

``CatalogClient`` talks to the HTTP API. ``CatalogSession`` holds the state of
the single-page UI (login/signup forms, product form, filters, grid) and drives
the client the way the page's buttons do.
"""

import enum
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from schemas import next_product_id

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:5000"
DEFAULT_MAX_PRICE = 1000.0
DEFAULT_PRICE_FILTER = 100.0
DEFAULT_RATING_FILTER = 4.0


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self):
        return f"{self.status_code}: {self.message}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or body)
    return str(body)


def intersect_by_id(left: List[dict], right: List[dict]) -> List[dict]:
    """Keep the records of ``left`` whose ``id`` also appears in ``right``."""
    ids = {p.get("id") for p in right}
    return [p for p in left if p.get("id") in ids]


class CatalogClient:
    def __init__(self, base_url: str = DEFAULT_BACKEND_URL, http: Optional[httpx.Client] = None):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url)
        self.token: Optional[str] = None

    def close(self) -> None:
        # a caller-supplied client is left to its owner
        if self._owns_http:
            self.http.close()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response

    def signup(self, email: str, password: str) -> str:
        return self._request("POST", "/signup", json={"email": email, "password": password}).text

    def login(self, email: str, password: str) -> str:
        response = self._request("POST", "/login", json={"email": email, "password": password})
        self.token = response.json()["accessToken"]
        return self.token

    def list_products(self) -> List[dict]:
        return self._request("GET", "/products").json()

    def create_product(self, data: Dict[str, Any]) -> dict:
        return self._request("POST", "/products", json=data).json()

    def update_product(self, product_id: str, data: Dict[str, Any]) -> dict:
        return self._request("PUT", f"/products/{product_id}", json=data).json()

    def delete_product(self, product_id: str) -> str:
        return self._request("DELETE", f"/products/{product_id}").text

    def featured_products(self) -> List[dict]:
        return self._request("GET", "/products/featured").json()

    def products_below_price(self, max_price: float) -> List[dict]:
        return self._request("GET", f"/products/price/{max_price}").json()

    def products_above_rating(self, min_rating: float) -> List[dict]:
        return self._request("GET", f"/products/rating/{min_rating}").json()

    def filter_products(self, max_price: float, min_rating: float) -> List[dict]:
        by_price = self.products_below_price(max_price)
        by_rating = self.products_above_rating(min_rating)
        return intersect_by_id(by_price, by_rating)


class SessionState(enum.Enum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


def empty_form() -> Dict[str, Any]:
    return {"name": "", "price": "", "company": "", "rating": "", "featured": False}


def _number(value) -> float:
    if value in ("", None):
        return 0.0
    return float(value)


class CatalogSession:
    def __init__(self, client: CatalogClient, alert: Optional[Callable[[str], None]] = None):
        self.client = client
        self.alert = alert or (lambda message: logger.warning("%s", message))
        self.state = SessionState.LOGGED_OUT
        self.auth_mode = "login"
        self.products: List[dict] = []
        self.form = empty_form()
        self.editing: Optional[dict] = None
        self.price_filter = DEFAULT_PRICE_FILTER
        self.rating_filter = DEFAULT_RATING_FILTER
        self.max_price = DEFAULT_MAX_PRICE

    @property
    def logged_in(self) -> bool:
        return self.state is SessionState.LOGGED_IN

    # -------- LoggedOut --------
    def toggle_auth_mode(self) -> str:
        self.auth_mode = "signup" if self.auth_mode == "login" else "login"
        return self.auth_mode

    def submit_signup(self, email: str, password: str) -> bool:
        try:
            self.client.signup(email, password)
        except (ApiError, httpx.HTTPError) as e:
            self.alert(f"Signup failed: {e}")
            return False
        self.alert("Signup successful")
        return True

    def submit_login(self, email: str, password: str) -> bool:
        try:
            self.client.login(email, password)
        except (ApiError, httpx.HTTPError) as e:
            self.alert(f"Login failed: {e}")
            return False
        self.state = SessionState.LOGGED_IN
        self.show_all()
        self._init_price_ceiling()
        return True

    def _init_price_ceiling(self):
        try:
            catalog = self.client.list_products()
        except (ApiError, httpx.HTTPError) as e:
            logger.error("Failed to fetch products for max price: %s", e)
            return
        prices = [p["price"] for p in catalog if isinstance(p.get("price"), (int, float))]
        self.max_price = max(prices) if prices else DEFAULT_MAX_PRICE
        self.price_filter = self.max_price

    # -------- Product form --------
    def _require_login(self):
        if not self.logged_in:
            raise RuntimeError("not logged in")

    def start_edit(self, product: dict) -> None:
        self.editing = product
        self.form = {
            "name": product.get("name", ""),
            "price": product.get("price", ""),
            "company": product.get("company", ""),
            "rating": product.get("rating", ""),
            "featured": bool(product.get("featured", False)),
        }

    def cancel_edit(self) -> None:
        self.form = empty_form()
        self.editing = None

    def _form_payload(self) -> Dict[str, Any]:
        return {
            **self.form,
            "price": _number(self.form["price"]),
            "rating": _number(self.form["rating"]),
        }

    def submit_product(self) -> bool:
        """Add a product, or update the one being edited."""
        self._require_login()
        try:
            payload = self._form_payload()
            if self.editing is None:
                payload["productId"] = next_product_id(p.get("productId") for p in self.products)
                self.client.create_product(payload)
            else:
                self.client.update_product(self.editing["id"], payload)
        except (ApiError, httpx.HTTPError, ValueError) as e:
            action = "add" if self.editing is None else "update"
            self.alert(f"Failed to {action} product: {e}")
            return False
        self.show_all()
        self.cancel_edit()
        return True

    def delete(self, product_id: str) -> bool:
        self._require_login()
        try:
            self.client.delete_product(product_id)
        except (ApiError, httpx.HTTPError) as e:
            self.alert(f"Failed to delete product: {e}")
            return False
        self.show_all()
        return True

    # -------- Views --------
    def _load(self, fetch: Callable[[], List[dict]], what: str) -> List[dict]:
        self._require_login()
        try:
            self.products = fetch()
        except (ApiError, httpx.HTTPError) as e:
            logger.error("Failed to fetch %s: %s", what, e)
        return self.products

    def show_all(self) -> List[dict]:
        return self._load(self.client.list_products, "products")

    def show_featured(self) -> List[dict]:
        return self._load(self.client.featured_products, "featured products")

    def apply_filters(self) -> List[dict]:
        return self._load(
            lambda: self.client.filter_products(self.price_filter, self.rating_filter),
            "filtered products",
        )
