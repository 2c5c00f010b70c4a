"""
Database Schemas for the product catalog

Each Pydantic model represents a MongoDB document or an API payload. Fields are
snake_case in Python and camelCase on the wire and in the store.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PRODUCT_ID_PREFIX = "P"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Credentials(BaseModel):
    email: str = Field(..., min_length=1, description="Login email")
    password: str = Field(..., min_length=1)


class User(BaseModel):
    email: str
    password: str = Field(..., description="Argon2 hash of the password")


class TokenResponse(CamelModel):
    access_token: str


class Product(CamelModel):
    product_id: Optional[str] = Field(None, min_length=1, description="P-prefixed sequence id, assigned when omitted")
    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., ge=0, description="Price")
    rating: Optional[float] = Field(None, ge=0, le=5)
    featured: bool = Field(False)
    company: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=_now)


class ProductUpdate(CamelModel):
    """Partial replacement; only the fields present in the payload are written."""

    product_id: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=0, le=5)
    featured: Optional[bool] = None
    company: Optional[str] = Field(None, min_length=1)
    created_at: Optional[datetime] = None

    @field_validator("product_id", "name", "price", "featured", "company", "created_at")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, by_alias=True)


def next_product_id(existing: Iterable[Optional[str]]) -> str:
    """Return the id following the last ``P<number>`` id in ``existing``.

    Ids are zero-padded to three digits; with no usable id the sequence starts
    at ``P001``.
    """
    last = 0
    for pid in existing:
        if isinstance(pid, str) and pid.startswith(PRODUCT_ID_PREFIX) and pid[1:].isdigit():
            last = int(pid[1:])
    return f"{PRODUCT_ID_PREFIX}{last + 1:03d}"
