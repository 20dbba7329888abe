# -*- coding: utf-8 -*-
"""
Master Auto Glass catalog client

One coroutine per vendor operation. Vendor business failures (callResult
Status other than Success) come back as an empty result with ``error`` set;
transport problems raise SoapError subclasses.
"""
import asyncio
import logging
import xml.etree.ElementTree as ET
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from glass_gateway.models import (
    CallResult, Credentials, Depot, VehicleStockQuery, PriceRecord,
    StockItem, DeliveryCode, OrderRequest,
    DepotsResult, MakesResult, ModelsResult, PriceRecordsResult, AvailabilityResult,
    BranchAvailabilityResult, OtherDepotsResult, DeliveryCodesResult, OrderResult,
    DepotStock, AvailabilitySummary, ConnectionCheck,
)
from glass_gateway.services.actions import build_body
from glass_gateway.services.credentials import CredentialProvider, get_credential_provider
from glass_gateway.services.soap import SoapTransport, SoapDocument, SoapError

logger = logging.getLogger(__name__)

MAX_REMEMBERED_ORDERS = 1000


def _to_int(value: str) -> int:
    try:
        return int(Decimal(value or "0"))
    except (InvalidOperation, ValueError, OverflowError):
        return 0


def _to_decimal(value: str) -> Decimal:
    try:
        result = Decimal(value or "0")
    except InvalidOperation:
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


class GlassCatalogClient:
    """Client for the Master Auto Glass stock and ordering operations"""

    def __init__(
        self,
        transport: SoapTransport = None,
        credentials: CredentialProvider = None,
        mode: str = None,
    ):
        self.transport = transport or SoapTransport()
        self.credentials = credentials or get_credential_provider()
        self.mode = mode
        # idempotency_key -> submission, oldest first
        self._orders_by_key: "OrderedDict[str, asyncio.Future]" = OrderedDict()

    async def _call(
        self, action: str, creds: Credentials, **params
    ) -> Tuple[SoapDocument, CallResult]:
        """Send an action and read its callResult"""
        body = build_body(action, self.transport.namespace, **params)
        doc = await self.transport.send(action, body, creds, self.mode)
        result = doc.call_result()

        if result.is_success:
            logger.info(f"{action} response: status={result.status.value}")
        else:
            logger.warning(
                f"{action} response: status={result.status.value}, "
                f"error={result.error_message!r}"
            )
        return doc, result

    @staticmethod
    def _error_text(result: CallResult, fallback: str) -> str:
        return result.error_message or f"{fallback} (status: {result.status.value})"

    # ==================== Record Parsing ====================

    @staticmethod
    def _parse_depot(doc: SoapDocument, el: ET.Element) -> Depot:
        return Depot(
            code=doc.text("DepotCode", parent=el),
            name=doc.text("DepotName", parent=el),
        )

    @staticmethod
    def _parse_price_record(doc: SoapDocument, el: ET.Element) -> PriceRecord:
        return PriceRecord(
            mag_code=doc.text("MagCode", parent=el),
            argic_code=doc.text("ArgicCode", parent=el),
            price=_to_decimal(doc.text("Price", parent=el)),
            qty=_to_int(doc.text("Qty", parent=el)),
            make=doc.text("Make", parent=el),
            description=doc.text("Description", parent=el),
            price_info=doc.text("PriceInfo", parent=el),
        )

    @staticmethod
    def _parse_stock_item(doc: SoapDocument, el: ET.Element) -> StockItem:
        return StockItem(
            branch=doc.text("_branch", parent=el),
            cat_id=_to_int(doc.text("_catID", parent=el)),
            mag_code=doc.text("_magCode", parent=el),
            argic_code=doc.text("_argicCode", parent=el),
            model=doc.text("_model", parent=el),
            qty=_to_int(doc.text("_qty", parent=el)),
            price=_to_decimal(doc.text("_price", parent=el)),
            customer_product_id=doc.text("_customerProductID", parent=el),
        )

    @staticmethod
    def _parse_delivery_code(doc: SoapDocument, el: ET.Element) -> DeliveryCode:
        return DeliveryCode(
            delivery_id=_to_int(doc.text("DeliveryID", parent=el)),
            delivery_name=doc.text("DeliveryName", parent=el),
            address=doc.text("Address", parent=el),
        )

    def _parse_depots(self, doc: SoapDocument, result_tag: str) -> list:
        scope = doc.find(result_tag)
        return [self._parse_depot(doc, el) for el in doc.find_all("Depot", parent=scope)]

    def _parse_strings(self, doc: SoapDocument, result_tag: str) -> list:
        scope = doc.find(result_tag)
        return [(el.text or "").strip() for el in doc.find_all("string", parent=scope)]

    # ==================== Reference Data ====================

    async def list_depots(self, credentials: Credentials = None) -> DepotsResult:
        """Get all vendor depots (GetDepots)"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("GetDepots", creds, credentials=creds)

        if not result.is_success:
            return DepotsResult(
                status=result.status,
                error=self._error_text(result, "Failed to retrieve depots"),
            )

        depots = self._parse_depots(doc, "GetDepotsResult")
        logger.info(f"Retrieved {len(depots)} depots")
        return DepotsResult(status=result.status, depots=depots)

    async def list_locations(self, credentials: Credentials = None) -> DepotsResult:
        """Get depots through the older GetLocations action"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("GetLocations", creds)

        if not result.is_success:
            return DepotsResult(
                status=result.status,
                error=self._error_text(result, "Failed to retrieve locations"),
            )
        return DepotsResult(status=result.status, depots=self._parse_depots(doc, "GetLocationsResult"))

    async def list_makes(self, credentials: Credentials = None) -> MakesResult:
        """Get all vehicle makes"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("GetMakes", creds)

        if not result.is_success:
            return MakesResult(
                status=result.status,
                error=self._error_text(result, "Failed to retrieve makes"),
            )

        makes = self._parse_strings(doc, "GetMakesResult")
        logger.info(f"Retrieved {len(makes)} makes")
        return MakesResult(status=result.status, makes=makes)

    async def list_models(self, make: str, credentials: Credentials = None) -> ModelsResult:
        """
        Get models for a make.

        An empty make is sent as-is; the vendor decides what it means.
        """
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("GetModels", creds, make=make)

        if not result.is_success:
            return ModelsResult(
                status=result.status,
                error=self._error_text(result, f"Failed to retrieve models for {make}"),
            )

        models = self._parse_strings(doc, "GetModelsResult")
        logger.info(f"Retrieved {len(models)} models for {make}")
        return ModelsResult(status=result.status, models=models)

    async def delivery_codes(self, credentials: Credentials = None) -> DeliveryCodesResult:
        """Get delivery options usable in place_order"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("getDeliveryCodes", creds)

        if not result.is_success:
            return DeliveryCodesResult(
                status=result.status,
                error=self._error_text(result, "Failed to retrieve delivery codes"),
            )

        codes = [self._parse_delivery_code(doc, el) for el in doc.find_all("Deliverycode")]
        return DeliveryCodesResult(status=result.status, delivery_codes=codes)

    # ==================== Stock Search ====================

    async def stock_by_vehicle(
        self, query: VehicleStockQuery, credentials: Credentials = None
    ) -> PriceRecordsResult:
        """Search glass parts fitting a vehicle (getStockList)"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("getStockList", creds, query=query)

        if not result.is_success:
            return PriceRecordsResult(
                status=result.status,
                error=self._error_text(result, "Stock list lookup failed"),
            )

        records = [self._parse_price_record(doc, el) for el in doc.find_all("PriceRecord")]
        logger.info(
            f"Stock list for {query.make} {query.model} {query.year}: {len(records)} records"
        )
        return PriceRecordsResult(status=result.status, price_records=records)

    async def stock_by_code(
        self, argic_code: str, location: str = "", credentials: Credentials = None
    ) -> PriceRecordsResult:
        """Search stock by ARGIC code, optionally limited to one location (StockSearch)"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call(
            "StockSearch", creds, argic_code=argic_code, location=location
        )

        if not result.is_success:
            return PriceRecordsResult(
                status=result.status,
                error=self._error_text(result, f"Stock search failed for {argic_code}"),
            )

        records = [self._parse_price_record(doc, el) for el in doc.find_all("PriceRecord")]
        logger.info(f"Stock search for {argic_code}: {len(records)} records")
        return PriceRecordsResult(status=result.status, price_records=records)

    # ==================== Availability ====================

    async def check_availability(
        self,
        argic_code: str,
        qty: int = 1,
        depot: str = "",
        credentials: Credentials = None,
        date_required: datetime = None,
    ) -> AvailabilityResult:
        """
        Check whether ``qty`` of a part can be supplied from one depot.

        Args:
            argic_code: ARGIC part identifier
            qty: Quantity needed
            depot: Depot code (empty for the account default)
            credentials: Optional credentials override
            date_required: Defaults to now

        Returns:
            AvailabilityResult
        """
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call(
            "checkAvailability",
            creds,
            argic_code=argic_code,
            qty=qty,
            depot=depot,
            date_required=date_required,
        )

        if not result.is_success:
            return AvailabilityResult(
                status=result.status,
                error=self._error_text(result, f"Availability check failed for {argic_code}"),
            )

        available = doc.text("checkAvailabilityResult").lower() == "true"
        logger.info(f"{argic_code} x{qty} at {depot or 'default depot'}: available={available}")
        return AvailabilityResult(status=result.status, is_available=available)

    async def branch_availability(
        self, argic_code: str, credentials: Credentials = None
    ) -> BranchAvailabilityResult:
        """Get stock for a part across every branch"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call("getBranchAvailability", creds, argic_code=argic_code)

        if not result.is_success:
            return BranchAvailabilityResult(
                status=result.status,
                error=self._error_text(result, f"Branch availability failed for {argic_code}"),
            )

        items = [self._parse_stock_item(doc, el) for el in doc.find_all("StockItem")]
        return BranchAvailabilityResult(status=result.status, stock_items=items)

    async def check_other_depots(
        self, stock_item: StockItem, location: str, credentials: Credentials = None
    ) -> OtherDepotsResult:
        """List other depots able to supply a stock line (CheckkOtherDepots)"""
        creds = self.credentials.resolve(credentials)
        doc, result = await self._call(
            "CheckkOtherDepots", creds, stock_item=stock_item, location=location
        )

        if not result.is_success:
            return OtherDepotsResult(
                status=result.status,
                error=self._error_text(result, "Other depot check failed"),
            )

        depots = [d for d in self._parse_strings(doc, "CheckkOtherDepotsResult") if d]
        return OtherDepotsResult(status=result.status, depots=depots)

    async def availability_summary(
        self, argic_code: str, credentials: Credentials = None
    ) -> AvailabilitySummary:
        """Branch availability reduced to branches holding stock, with a total"""
        branches = await self.branch_availability(argic_code, credentials)

        if branches.error is not None:
            return AvailabilitySummary(
                argic_code=argic_code, status=branches.status, error=branches.error
            )

        depots = [
            DepotStock(branch=item.branch, quantity=item.qty, price=item.price)
            for item in branches.stock_items
            if item.qty > 0
        ]
        return AvailabilitySummary(
            argic_code=argic_code,
            status=branches.status,
            depots=depots,
            total_available=sum(d.quantity for d in depots),
            count=len(depots),
        )

    # ==================== Orders ====================

    async def place_order(
        self, order: OrderRequest, credentials: Credentials = None
    ) -> OrderResult:
        """
        Submit a stock order (StockOrder).

        Not idempotent on the vendor side: a retry after a timeout can create a
        second order. When ``order.idempotency_key`` is set, the key is claimed
        before the vendor call, so a repeat of the key (concurrent or later)
        shares the first submission's outcome instead of calling the vendor
        again. A key whose order failed is released and can be retried.

        The last MAX_REMEMBERED_ORDERS keys are remembered, per process.

        Returns:
            OrderResult; order_id 0 means no order was created
        """
        creds = self.credentials.resolve(credentials)
        key = order.idempotency_key
        if not key:
            return await self._submit_order(order, creds)

        pending = self._orders_by_key.get(key)
        if pending is not None:
            logger.info(f"Order key {key} already submitted, reusing its outcome")
            return await asyncio.shield(pending)

        submission = asyncio.ensure_future(self._submit_order(order, creds))
        submission.add_done_callback(lambda task: self._settle_order_key(key, task))
        self._orders_by_key[key] = submission
        while len(self._orders_by_key) > MAX_REMEMBERED_ORDERS:
            self._orders_by_key.popitem(last=False)

        # A cancelled caller leaves the submission running
        return await asyncio.shield(submission)

    def _settle_order_key(self, key: str, task: "asyncio.Future") -> None:
        """Release a key whose order was not placed"""
        if self._orders_by_key.get(key) is not task:
            return
        if task.cancelled() or task.exception() is not None or not task.result().succeeded:
            del self._orders_by_key[key]

    async def _submit_order(self, order: OrderRequest, creds: Credentials) -> OrderResult:
        doc, result = await self._call("StockOrder", creds, order=order)

        if not result.is_success:
            return OrderResult(
                status=result.status,
                error=self._error_text(result, f"Order {order.purchase_order_no} failed"),
            )

        order_id = _to_int(doc.text("StockOrderResult"))
        if order_id <= 0:
            logger.error(f"StockOrder reported Success without an order ID ({order.purchase_order_no})")
            return OrderResult(
                status=result.status,
                order_id=0,
                error="Vendor reported success but returned no order ID",
            )

        logger.info(f"Order {order.purchase_order_no} placed: vendor order {order_id}")
        return OrderResult(status=result.status, order_id=order_id)

    # ==================== Diagnostics ====================

    async def test_connection(self, credentials: Credentials = None) -> ConnectionCheck:
        """Round-trip HelloWorld; reports instead of raising"""
        creds = self.credentials.resolve(credentials)
        mode = self.mode or self.transport.settings.MAG_TRANSPORT_MODE
        body = build_body("HelloWorld", self.transport.namespace)
        try:
            doc = await self.transport.send("HelloWorld", body, creds, mode)
        except SoapError as e:
            logger.error(f"Connection test failed: {e.message}")
            return ConnectionCheck(success=False, message=f"Connection error: {e.message}")

        greeting = doc.text("HelloWorldResult")
        message = f"Connected ({mode})" + (f": {greeting}" if greeting else "")
        return ConnectionCheck(success=True, message=message)


# Singleton instance
_glass_client: Optional[GlassCatalogClient] = None


def get_glass_client() -> GlassCatalogClient:
    """Get glass catalog client singleton"""
    global _glass_client
    if _glass_client is None:
        _glass_client = GlassCatalogClient()
    return _glass_client
