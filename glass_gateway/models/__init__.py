# Glass Gateway Pydantic Models
from .glass import (
    CallStatus, CallResult, Credentials, Depot, VehicleStockQuery,
    PriceRecord, StockItem, DeliveryCode, OrderRequest,
)
from .results import (
    CatalogResult, DepotsResult, MakesResult, ModelsResult, PriceRecordsResult,
    AvailabilityResult, BranchAvailabilityResult, OtherDepotsResult,
    DeliveryCodesResult, OrderResult, DepotStock, AvailabilitySummary,
    ConnectionCheck,
)

__all__ = [
    # Vendor records
    "CallStatus",
    "CallResult",
    "Credentials",
    "Depot",
    "VehicleStockQuery",
    "PriceRecord",
    "StockItem",
    "DeliveryCode",
    "OrderRequest",
    # Results
    "CatalogResult",
    "DepotsResult",
    "MakesResult",
    "ModelsResult",
    "PriceRecordsResult",
    "AvailabilityResult",
    "BranchAvailabilityResult",
    "OtherDepotsResult",
    "DeliveryCodesResult",
    "OrderResult",
    "DepotStock",
    "AvailabilitySummary",
    "ConnectionCheck",
]
