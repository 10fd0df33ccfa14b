from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Spellings of the batch id seen across stock payloads, in lookup order.
BATCH_ID_KEYS = ("stock_batch_id", "stockBatchId", "batch_id", "batchId")
NESTED_BATCH_KEYS = ("stock_batch", "stockBatch")


def _id_to_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, UUID):
        return str(v)
    v = str(v).strip()
    return v or None


class StockEntry(BaseModel):
    """One stock line of a product at an outlet, as fed to the price resolver.

    Prices and batch timestamps are kept as received; the resolver coerces them.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    unit_id: Optional[str] = Field(default=None, alias="unitId")
    price_per_quantity: Any = Field(default=None, alias="pricePerQuantity")
    stock_batch_created_at: Any = Field(default=None, alias="stockBatchCreatedAt")
    stock_batch_id: Optional[str] = Field(default=None, alias="stockBatchId")

    @model_validator(mode="before")
    @classmethod
    def _reconcile_batch_id(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        batch_id = None
        for key in BATCH_ID_KEYS:
            if data.get(key) is not None:
                batch_id = data[key]
                break
        if batch_id is None:
            for key in NESTED_BATCH_KEYS:
                nested = data.get(key)
                if isinstance(nested, dict) and nested.get("id") is not None:
                    batch_id = nested["id"]
                    break
                if nested is not None and getattr(nested, "id", None) is not None:
                    batch_id = nested.id
                    break
        for key in BATCH_ID_KEYS + NESTED_BATCH_KEYS:
            data.pop(key, None)
        data["stock_batch_id"] = batch_id
        return data

    @field_validator("unit_id", "stock_batch_id", mode="before")
    @classmethod
    def _ids_as_str(cls, v: Any) -> Optional[str]:
        return _id_to_str(v)


class Unit(BaseModel):
    id: str
    name: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return _id_to_str(v) if v is not None else v


class PriceEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unit_id: str = Field(alias="unitId")
    price_per_quantity: float = Field(alias="pricePerQuantity")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class DeliveryLatestPricesOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    updated_at: datetime = Field(alias="updatedAt")
    latest_unit_price_data: List[PriceEntry] = Field(alias="latestUnitPriceData")
