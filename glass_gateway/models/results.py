# -*- coding: utf-8 -*-
"""
Operation result models

Business failures (vendor status other than Success) come back as an empty
collection plus ``error``. Transport failures are raised, never returned.
"""
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field

from .glass import CallStatus, Depot, PriceRecord, StockItem, DeliveryCode


class CatalogResult(BaseModel):
    """Base result carrying the vendor status"""
    status: CallStatus = Field(CallStatus.NONE, description="Vendor status")
    error: Optional[str] = Field(None, description="Vendor error message")

    @property
    def ok(self) -> bool:
        return self.error is None and self.status == CallStatus.SUCCESS


class DepotsResult(CatalogResult):
    depots: List[Depot] = Field(default_factory=list)


class MakesResult(CatalogResult):
    makes: List[str] = Field(default_factory=list)


class ModelsResult(CatalogResult):
    models: List[str] = Field(default_factory=list)


class PriceRecordsResult(CatalogResult):
    price_records: List[PriceRecord] = Field(default_factory=list)


class AvailabilityResult(CatalogResult):
    is_available: bool = False


class BranchAvailabilityResult(CatalogResult):
    stock_items: List[StockItem] = Field(default_factory=list)


class OtherDepotsResult(CatalogResult):
    depots: List[str] = Field(default_factory=list)


class DeliveryCodesResult(CatalogResult):
    delivery_codes: List[DeliveryCode] = Field(default_factory=list)


class OrderResult(CatalogResult):
    """Order outcome. ``order_id`` 0 always means no order was created."""
    order_id: int = 0

    @property
    def succeeded(self) -> bool:
        return self.ok and self.order_id > 0


class DepotStock(BaseModel):
    """Stock held at one branch"""
    branch: str
    quantity: int
    price: Decimal


class AvailabilitySummary(CatalogResult):
    """Branch availability reduced to branches that hold stock"""
    argic_code: str
    depots: List[DepotStock] = Field(default_factory=list)
    total_available: int = 0
    count: int = 0


class ConnectionCheck(BaseModel):
    """Outcome of a HelloWorld round trip"""
    success: bool
    message: str
