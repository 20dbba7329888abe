# -*- coding: utf-8 -*-
"""
Master Auto Glass record Pydantic Models
"""
from decimal import Decimal
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class CallStatus(str, Enum):
    """Vendor callResult status values (pdaservice.asmx WSDL)"""
    NONE = "None"
    NONE_STATUS = "NoneStatus"
    SUCCESS = "Success"
    SYSTEM_ERROR = "SystemError"
    ARGIC_CODES_NOT_FOUND = "ArgicCodesNotFound"
    AUTHORISATION_FAILED = "AuthorisationFailed"
    NOT_ENOUGH_STOCK = "NotEnoughStock"
    INVALID_USER = "InvalidUser"
    INVALID_PASSWORD = "InvalidPassword"
    LOGGED_ON = "LoggedOn"
    SQL_FAILED = "sqlFailed"


class CallResult(BaseModel):
    """Status/error pair embedded in every vendor response"""
    status: CallStatus = Field(CallStatus.NONE, description="Vendor status")
    error_message: str = Field("", description="Vendor error message")

    @property
    def is_success(self) -> bool:
        return self.status == CallStatus.SUCCESS


class Credentials(BaseModel):
    """SecureHeader values sent with every call"""
    login: str = Field(..., min_length=1, description="Vendor account login")
    password: SecretStr = Field(..., description="Vendor account password")
    user_id: int = Field(..., description="Vendor user ID")


class Depot(BaseModel):
    """Vendor stock-holding location"""
    code: str = Field(..., description="DepotCode")
    name: str = Field("", description="DepotName")


class VehicleStockQuery(BaseModel):
    """Vehicle details used to look up matching glass"""
    model_config = ConfigDict(protected_namespaces=())

    make: str = Field(..., description="Vehicle make, e.g. Ford")
    model: str = Field(..., description="Vehicle model, e.g. Focus")
    model_type: str = Field("", description="Body/model variant")
    year: int = Field(..., description="Year of manufacture")


class PriceRecord(BaseModel):
    """One purchasable glass part at the current vendor price/stock"""
    mag_code: str = Field("", description="MAG internal code")
    argic_code: str = Field("", description="ARGIC part identifier")
    price: Decimal = Field(Decimal("0"), description="Unit price")
    qty: int = Field(0, description="Quantity in stock")
    make: str = Field("", description="Vehicle make")
    description: str = Field("", description="Part description")
    price_info: str = Field("", description="Free-text price notes")


class StockItem(BaseModel):
    """Stock line: a branch availability row or an order line"""
    branch: str = Field("", description="Branch / depot code")
    cat_id: int = Field(0, description="Vendor catalogue ID")
    mag_code: str = Field("", description="MAG internal code")
    argic_code: str = Field("", description="ARGIC part identifier")
    model: str = Field("", description="Vehicle model")
    qty: int = Field(0, description="Quantity")
    price: Decimal = Field(Decimal("0"), description="Unit price")
    customer_product_id: str = Field("", description="Caller's own product reference")


class DeliveryCode(BaseModel):
    """Delivery option for orders"""
    delivery_id: int = Field(0, description="DeliveryID")
    delivery_name: str = Field("", description="DeliveryName")
    address: str = Field("", description="Delivery address")


class OrderRequest(BaseModel):
    """Stock order submitted once to the vendor"""
    stock_items: List[StockItem] = Field(..., min_length=1, description="Order lines")
    purchase_order_no: str = Field(..., description="Caller purchase order number")
    depot: str = Field("", description="Depot to order from")
    delivery_id: int = Field(..., description="DeliveryID from delivery codes")
    comment: str = Field("", description="Order comment")
    idempotency_key: Optional[str] = Field(
        None, description="Caller token; a repeated key returns the first successful order"
    )
