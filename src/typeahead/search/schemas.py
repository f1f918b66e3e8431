"""Pydantic v2 models for product search responses.

Validates the JSON bodies returned by the remote ``/products`` endpoint
before they are turned into ``typeahead.models.Product`` dataclasses.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductRecord(BaseModel):
    """One product as returned by the endpoint. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: int
    title: str = Field(min_length=1)
    category: str | None = None
    image: str | None = None
    price: float | None = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class ProductPageBody(BaseModel):
    """Envelope of a page response: ``{"products": [...], ...}``."""

    model_config = ConfigDict(extra="allow")

    products: list[ProductRecord] = Field(default_factory=list)
