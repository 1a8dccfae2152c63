"""Shipping DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ShippingItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(ge=0)
    quantity: int = Field(gt=0)
    weight: Optional[Decimal] = Field(default=None, gt=0)


class PackageDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    length: int
    weight: Decimal
    insurance_value: Decimal

    def to_provider(self) -> Dict[str, Any]:
        return {
            "id": "1",
            "width": self.width,
            "height": self.height,
            "length": self.length,
            "weight": float(self.weight),
            "insurance_value": float(self.insurance_value),
            "quantity": 1,
        }


class CarrierDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Any
    name: str
    picture: str = ""


class ShippingOptionDTO(BaseModel):
    """One quote as the storefront expects it."""

    model_config = ConfigDict(frozen=True)

    id: Any
    name: str
    company: CarrierDTO
    price: str
    custom_price: str
    discount: str = "0.00"
    currency: str = "BRL"
    delivery_time: int
    delivery_min: int
    delivery_max: int
    packages: List[Any] = []

    @classmethod
    def from_provider(cls, option: Dict[str, Any]) -> "ShippingOptionDTO":
        company = option.get("company") or {}
        delivery_time = int(option.get("delivery_time") or 0)
        delivery_range = option.get("delivery_range") or {}
        return cls(
            id=option.get("id"),
            name=option.get("name", ""),
            company=CarrierDTO(
                id=company.get("id"),
                name=company.get("name", ""),
                picture=company.get("picture") or "",
            ),
            price=str(option.get("price", "")),
            custom_price=str(option.get("custom_price") or option.get("price", "")),
            discount=str(option.get("discount") or "0.00"),
            currency=option.get("currency") or "BRL",
            delivery_time=delivery_time,
            delivery_min=int(delivery_range.get("min") or delivery_time),
            delivery_max=int(delivery_range.get("max") or delivery_time),
            packages=option.get("packages") or [],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company.model_dump(),
            "price": self.price,
            "custom_price": self.custom_price,
            "discount": self.discount,
            "currency": self.currency,
            "delivery_time": self.delivery_time,
            "delivery_range": {"min": self.delivery_min, "max": self.delivery_max},
            "packages": list(self.packages),
        }


class CepAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    cep: str
    street: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "street": self.street,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "state": self.state,
        }
