"""Tests for GlassCatalogClient operations against a scripted vendor."""
import asyncio
from datetime import datetime
from decimal import Decimal

import httpx
import pytest

from glass_gateway.models import CallStatus, OrderRequest, StockItem, VehicleStockQuery
from glass_gateway.services import SoapFaultError, SoapTimeoutError, SoapTransportError
from glass_gateway.services import glass_catalog
from soap_fixtures import action_response, fault_response, price_record, stock_item


def _order(**overrides) -> OrderRequest:
    data = dict(
        stock_items=[StockItem(branch="LONDON01", cat_id=17, argic_code="2448AGNMV1B", qty=1, price=Decimal("79.99"))],
        purchase_order_no="PO-1001",
        depot="LONDON01",
        delivery_id=2,
        comment="Fit Tuesday",
    )
    data.update(overrides)
    return OrderRequest(**data)


# ==================== Reference Data ====================

async def test_list_depots_maps_depot_records(client, vendor):
    vendor.reply(action_response(
        "GetDepots",
        "<GetDepotsResult>"
        "<Depot><DepotCode>LONDON01</DepotCode><DepotName>London Park Royal</DepotName></Depot>"
        "<Depot><DepotCode>LEEDS02</DepotCode><DepotName>Leeds</DepotName></Depot>"
        "</GetDepotsResult>",
    ))

    result = await client.list_depots()

    assert result.ok
    assert [(d.code, d.name) for d in result.depots] == [
        ("LONDON01", "London Park Royal"),
        ("LEEDS02", "Leeds"),
    ]
    # Login details travel in the body as well as the header
    assert "<accountCode>TECH-7</accountCode>" in vendor.last_body


async def test_list_locations_uses_get_locations(client, vendor):
    vendor.reply(action_response(
        "GetLocations",
        "<GetLocationsResult><Depot><DepotCode>BRS01</DepotCode><DepotName>Bristol</DepotName></Depot></GetLocationsResult>",
    ))

    result = await client.list_locations()

    assert result.depots[0].code == "BRS01"
    assert vendor.requests[0].headers["SOAPAction"].endswith("/GetLocations")


async def test_list_makes_and_models(client, vendor):
    vendor.reply(action_response(
        "GetMakes", "<GetMakesResult><string>AUDI</string><string>FORD</string></GetMakesResult>"
    ))
    vendor.reply(action_response(
        "GetModels", "<GetModelsResult><string>FIESTA</string><string>FOCUS</string></GetModelsResult>"
    ))

    makes = await client.list_makes()
    models = await client.list_models("FORD")

    assert makes.makes == ["AUDI", "FORD"]
    assert models.models == ["FIESTA", "FOCUS"]
    assert "<make>FORD</make>" in vendor.last_body


async def test_list_models_sends_empty_make_unvalidated(client, vendor):
    vendor.reply(action_response("GetModels", status="SystemError", error="Make required"))

    result = await client.list_models("")

    assert "<make></make>" in vendor.last_body
    assert result.models == []
    assert result.error == "Make required"


async def test_delivery_codes_mapping(client, vendor):
    vendor.reply(action_response(
        "getDeliveryCodes",
        "<getDeliveryCodesResult>"
        "<Deliverycode><DeliveryID>2</DeliveryID><DeliveryName>Next day</DeliveryName><Address>Unit 4, Slough</Address></Deliverycode>"
        "<Deliverycode><DeliveryID>5</DeliveryID><DeliveryName>Collect</DeliveryName><Address></Address></Deliverycode>"
        "</getDeliveryCodesResult>",
    ))

    result = await client.delivery_codes()

    assert len(result.delivery_codes) == 2
    first = result.delivery_codes[0]
    assert (first.delivery_id, first.delivery_name, first.address) == (2, "Next day", "Unit 4, Slough")
    assert result.delivery_codes[1].address == ""


# ==================== Stock Search ====================

async def test_stock_by_vehicle_example(client, vendor):
    vendor.reply(action_response(
        "getStockList",
        "<getStockListResult>"
        + price_record("MAG1", "2448AGNMV1B", "79.99", "3", price_info="Trade")
        + price_record("MAG2", "2448AGNMV1B", "79.99", "3", description="Windscreen heated")
        + "</getStockListResult>",
    ))

    query = VehicleStockQuery(make="Ford", model="Focus", model_type="", year=2020)
    result = await client.stock_by_vehicle(query)

    assert len(result.price_records) == 2
    first = result.price_records[0]
    assert first.price == Decimal("79.99")
    assert first.mag_code == "MAG1"
    assert first.argic_code == "2448AGNMV1B"
    assert first.qty == 3
    assert first.make == "FORD"
    assert first.description == "Windscreen"
    assert first.price_info == "Trade"
    assert result.price_records[1].description == "Windscreen heated"
    assert "<year>2020</year>" in vendor.last_body


async def test_stock_by_code_passes_location(client, vendor):
    vendor.reply(action_response(
        "StockSearch", "<StockSearchResult>" + price_record("MAG9", "3565AGSMVZ", "120.50", "1") + "</StockSearchResult>"
    ))

    result = await client.stock_by_code("3565AGSMVZ", "LEEDS02")

    assert result.price_records[0].price == Decimal("120.50")
    assert "<argic>3565AGSMVZ</argic>" in vendor.last_body
    assert "<location>LEEDS02</location>" in vendor.last_body


async def test_unparseable_numbers_fall_back_to_zero(client, vendor):
    vendor.reply(action_response(
        "StockSearch", price_record("MAG9", "3565AGSMVZ", "POA", "")
    ))

    result = await client.stock_by_code("3565AGSMVZ")

    assert result.price_records[0].price == Decimal("0")
    assert result.price_records[0].qty == 0


# ==================== Business vs transport errors ====================

async def test_authorisation_failed_returns_empty_with_error(client, vendor):
    vendor.reply(action_response("getStockList", status="AuthorisationFailed", error="Invalid login details"))

    result = await client.stock_by_vehicle(
        VehicleStockQuery(make="Ford", model="Focus", year=2020)
    )

    assert result.price_records == []
    assert result.error == "Invalid login details"
    assert result.status == CallStatus.AUTHORISATION_FAILED
    assert not result.ok


async def test_business_error_without_message_gets_default(client, vendor):
    vendor.reply(action_response("GetMakes", status="sqlFailed"))

    result = await client.list_makes()

    assert result.makes == []
    assert result.error
    assert "sqlFailed" in result.error


async def test_http_500_raises_transport_error(client, vendor):
    vendor.reply("Service Unavailable", status_code=500)

    with pytest.raises(SoapTransportError) as exc_info:
        await client.list_depots()

    assert exc_info.value.status_code == 500


async def test_soap_fault_raises_not_returned(client, vendor):
    vendor.reply(fault_response("Object reference not set to an instance of an object."))

    with pytest.raises(SoapFaultError, match="Object reference not set"):
        await client.stock_by_code("2448AGNMV1B")


# ==================== Availability ====================

async def test_check_availability_example(client, vendor):
    vendor.reply(action_response("checkAvailability", "<checkAvailabilityResult>true</checkAvailabilityResult>"))

    result = await client.check_availability("2448AGNMV1B", 1, "LONDON01")

    assert result.is_available is True
    assert result.error is None
    assert "<depot>LONDON01</depot>" in vendor.last_body


async def test_check_availability_uses_supplied_date(client, vendor):
    vendor.reply(action_response("checkAvailability", "<checkAvailabilityResult>false</checkAvailabilityResult>"))

    result = await client.check_availability(
        "2448AGNMV1B", 4, "LONDON01", date_required=datetime(2026, 11, 2, 9, 0)
    )

    assert result.is_available is False
    assert "<dateRequired>2026-11-02T09:00:00</dateRequired>" in vendor.last_body
    assert "<qty>4</qty>" in vendor.last_body


async def test_check_availability_not_enough_stock(client, vendor):
    vendor.reply(action_response("checkAvailability", status="NotEnoughStock", error="Only 0 in stock"))

    result = await client.check_availability("2448AGNMV1B", 5, "LONDON01")

    assert result.is_available is False
    assert result.error == "Only 0 in stock"


async def test_branch_availability_maps_stock_items(client, vendor):
    vendor.reply(action_response(
        "getBranchAvailability",
        "<getBranchAvailabilityResult>"
        + stock_item("LONDON01", "17", "MAG1", "2448AGNMV1B", "FOCUS", "3", "79.99", "C-1")
        + stock_item("LEEDS02", "17", "MAG1", "2448AGNMV1B", "FOCUS", "0", "81.00")
        + "</getBranchAvailabilityResult>",
    ))

    result = await client.branch_availability("2448AGNMV1B")

    assert len(result.stock_items) == 2
    first = result.stock_items[0]
    assert first.branch == "LONDON01"
    assert first.cat_id == 17
    assert first.mag_code == "MAG1"
    assert first.argic_code == "2448AGNMV1B"
    assert first.model == "FOCUS"
    assert first.qty == 3
    assert first.price == Decimal("79.99")
    assert first.customer_product_id == "C-1"


async def test_availability_summary_lists_only_stocked_branches(client, vendor):
    vendor.reply(action_response(
        "getBranchAvailability",
        stock_item("LONDON01", "17", "MAG1", "2448AGNMV1B", "FOCUS", "3", "79.99")
        + stock_item("LEEDS02", "17", "MAG1", "2448AGNMV1B", "FOCUS", "0", "81.00")
        + stock_item("BRS01", "17", "MAG1", "2448AGNMV1B", "FOCUS", "2", "80.00"),
    ))

    summary = await client.availability_summary("2448AGNMV1B")

    assert [d.branch for d in summary.depots] == ["LONDON01", "BRS01"]
    assert summary.total_available == 5
    assert summary.count == 2


async def test_availability_summary_carries_business_error(client, vendor):
    vendor.reply(action_response("getBranchAvailability", status="ArgicCodesNotFound", error="Unknown code"))

    summary = await client.availability_summary("NOPE")

    assert summary.error == "Unknown code"
    assert summary.depots == []
    assert summary.total_available == 0


async def test_check_other_depots(client, vendor):
    vendor.reply(action_response(
        "CheckkOtherDepots",
        "<CheckkOtherDepotsResult><string>LEEDS02</string><string></string><string>BRS01</string></CheckkOtherDepotsResult>",
    ))

    line = StockItem(branch="LONDON01", cat_id=17, argic_code="2448AGNMV1B", qty=2, price=Decimal("79.99"))
    result = await client.check_other_depots(line, "LONDON01")

    assert result.depots == ["LEEDS02", "BRS01"]
    assert "<stockItm>" in vendor.last_body


# ==================== Orders ====================

async def test_place_order_returns_vendor_order_id(client, vendor):
    vendor.reply(action_response("StockOrder", "<StockOrderResult>884211</StockOrderResult>"))

    result = await client.place_order(_order())

    assert result.order_id == 884211
    assert result.succeeded
    assert "<purchaseOrderNo>PO-1001</purchaseOrderNo>" in vendor.last_body


async def test_place_order_success_without_result_is_not_an_order(client, vendor):
    vendor.reply(action_response("StockOrder"))

    result = await client.place_order(_order())

    assert result.order_id == 0
    assert result.status == CallStatus.SUCCESS
    assert result.error
    assert not result.succeeded
    assert not result.ok


async def test_place_order_business_failure(client, vendor):
    vendor.reply(action_response("StockOrder", status="NotEnoughStock", error="Insufficient stock"))

    result = await client.place_order(_order())

    assert result.order_id == 0
    assert result.error == "Insufficient stock"
    assert not result.succeeded


async def test_place_order_without_key_submits_every_time(client, vendor):
    vendor.reply(action_response("StockOrder", "<StockOrderResult>1</StockOrderResult>"))
    vendor.reply(action_response("StockOrder", "<StockOrderResult>2</StockOrderResult>"))

    first = await client.place_order(_order())
    second = await client.place_order(_order())

    assert (first.order_id, second.order_id) == (1, 2)
    assert len(vendor.requests) == 2


async def test_place_order_repeated_key_is_not_resubmitted(client, vendor):
    vendor.reply(action_response("StockOrder", "<StockOrderResult>77</StockOrderResult>"))

    first = await client.place_order(_order(idempotency_key="job-42"))
    second = await client.place_order(_order(idempotency_key="job-42"))

    assert first.order_id == second.order_id == 77
    assert len(vendor.requests) == 1


async def test_failed_order_key_can_be_retried(client, vendor):
    vendor.reply(action_response("StockOrder", status="SystemError", error="Try later"))
    vendor.reply(action_response("StockOrder", "<StockOrderResult>78</StockOrderResult>"))

    first = await client.place_order(_order(idempotency_key="job-43"))
    second = await client.place_order(_order(idempotency_key="job-43"))

    assert first.order_id == 0
    assert second.order_id == 78


async def test_concurrent_repeats_of_a_key_share_one_submission(client, vendor):
    vendor.delay = 0.05
    vendor.reply(action_response("StockOrder", "<StockOrderResult>79</StockOrderResult>"))

    first, second = await asyncio.gather(
        client.place_order(_order(idempotency_key="job-44")),
        client.place_order(_order(idempotency_key="job-44")),
    )

    assert first.order_id == second.order_id == 79
    assert len(vendor.requests) == 1


async def test_concurrent_failure_releases_the_key(client, vendor):
    vendor.delay = 0.05
    vendor.fail_with(httpx.ReadTimeout, "read timed out")
    vendor.reply(action_response("StockOrder", "<StockOrderResult>80</StockOrderResult>"))

    outcomes = await asyncio.gather(
        client.place_order(_order(idempotency_key="job-45")),
        client.place_order(_order(idempotency_key="job-45")),
        return_exceptions=True,
    )

    assert all(isinstance(outcome, SoapTimeoutError) for outcome in outcomes)
    assert len(vendor.requests) == 1

    retried = await client.place_order(_order(idempotency_key="job-45"))

    assert retried.order_id == 80
    assert len(vendor.requests) == 2


async def test_order_keys_beyond_the_limit_are_forgotten(client, vendor, monkeypatch):
    monkeypatch.setattr(glass_catalog, "MAX_REMEMBERED_ORDERS", 2)
    for order_id in (81, 82, 83, 84):
        vendor.reply(action_response("StockOrder", f"<StockOrderResult>{order_id}</StockOrderResult>"))

    for key in ("job-a", "job-b", "job-c"):
        await client.place_order(_order(idempotency_key=key))
    again = await client.place_order(_order(idempotency_key="job-a"))
    kept = await client.place_order(_order(idempotency_key="job-c"))

    assert again.order_id == 84
    assert kept.order_id == 83
    assert len(vendor.requests) == 4


# ==================== Credentials & diagnostics ====================

async def test_explicit_credentials_override_default(client, vendor, creds):
    vendor.reply(action_response("GetMakes"))

    await client.list_makes(creds)

    assert "<Login>Q-200</Login>" in vendor.last_body
    assert "<UserID>3</UserID>" in vendor.last_body


async def test_default_credentials_from_settings(client, vendor):
    vendor.reply(action_response("GetMakes"))

    await client.list_makes()

    assert "<Login>TECH-7</Login>" in vendor.last_body
    assert "<Password>pa&amp;ss&lt;word&gt;</Password>" in vendor.last_body


async def test_connection_check_success(client, vendor):
    vendor.reply(action_response("HelloWorld", "<HelloWorldResult>Hello World</HelloWorldResult>"))

    check = await client.test_connection()

    assert check.success
    assert "Hello World" in check.message


async def test_connection_check_reports_transport_failure(client, vendor):
    vendor.reply("Bad Gateway", status_code=502)

    check = await client.test_connection()

    assert check.success is False
    assert "502" in check.message
