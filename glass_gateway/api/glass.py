# -*- coding: utf-8 -*-
"""
Glass catalog API Router
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from glass_gateway.models import (
    Credentials, VehicleStockQuery, StockItem, OrderRequest,
    DepotsResult, MakesResult, ModelsResult, PriceRecordsResult, AvailabilityResult,
    BranchAvailabilityResult, OtherDepotsResult, DeliveryCodesResult, OrderResult,
    AvailabilitySummary, ConnectionCheck,
)
from glass_gateway.services import GlassCatalogClient, get_glass_client, SoapError, SoapTimeoutError

router = APIRouter(prefix="/glass", tags=["glass"])


class OtherDepotsQuery(BaseModel):
    """Body for the other-depots check"""
    stock_item: StockItem
    location: str = Field(..., description="Depot the line was first requested from")


def user_credentials(
    client: GlassCatalogClient = Depends(get_glass_client),
    x_user_email: Optional[str] = Header(None, description="Authenticated platform user"),
) -> Credentials:
    """Vendor credentials for the calling user"""
    return client.credentials.resolve(user_email=x_user_email)


async def soap_error_handler(request: Request, exc: SoapError) -> JSONResponse:
    """Transport-level failures: 504 on timeout, 502 otherwise"""
    status_code = 504 if isinstance(exc, SoapTimeoutError) else 502
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": exc.message,
            "upstream_status": exc.status_code,
        },
    )


# ==================== Reference Data ====================

@router.get("/depots", response_model=DepotsResult)
async def list_depots(
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Get all vendor depots"""
    return await client.list_depots(credentials)


@router.get("/locations", response_model=DepotsResult)
async def list_locations(
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Get depots via GetLocations"""
    return await client.list_locations(credentials)


@router.get("/makes", response_model=MakesResult)
async def list_makes(
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Get vehicle makes"""
    return await client.list_makes(credentials)


@router.get("/models", response_model=ModelsResult)
async def list_models(
    make: str = Query("", description="Vehicle make"),
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Get models for a make"""
    return await client.list_models(make, credentials)


@router.get("/delivery-codes", response_model=DeliveryCodesResult)
async def delivery_codes(
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Get delivery codes for orders"""
    return await client.delivery_codes(credentials)


# ==================== Stock ====================

@router.get("/stock/vehicle", response_model=PriceRecordsResult)
async def stock_by_vehicle(
    make: str = Query(..., description="Vehicle make"),
    model: str = Query(..., description="Vehicle model"),
    model_type: str = Query("", description="Model variant"),
    year: int = Query(..., ge=1900, le=2100, description="Year of manufacture"),
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """
    Search glass by vehicle.

    - **make**, **model**, **year**: required
    - **model_type**: optional variant
    """
    query = VehicleStockQuery(make=make, model=model, model_type=model_type, year=year)
    return await client.stock_by_vehicle(query, credentials)


@router.get("/stock/code/{argic_code}", response_model=PriceRecordsResult)
async def stock_by_code(
    argic_code: str,
    location: str = Query("", description="Restrict to one depot"),
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Search glass by ARGIC code"""
    return await client.stock_by_code(argic_code, location, credentials)


# ==================== Availability ====================

@router.get("/availability/{argic_code}", response_model=AvailabilityResult)
async def check_availability(
    argic_code: str,
    qty: int = Query(1, ge=1, description="Quantity required"),
    depot: str = Query("", description="Depot code"),
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Check availability of a part at one depot"""
    return await client.check_availability(argic_code, qty, depot, credentials)


@router.get("/availability/{argic_code}/branches", response_model=BranchAvailabilityResult)
async def branch_availability(
    argic_code: str,
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Stock for a part at every branch"""
    return await client.branch_availability(argic_code, credentials)


@router.get("/availability/{argic_code}/summary", response_model=AvailabilitySummary)
async def availability_summary(
    argic_code: str,
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Branches holding stock for a part, with the total available"""
    return await client.availability_summary(argic_code, credentials)


@router.post("/availability/other-depots", response_model=OtherDepotsResult)
async def check_other_depots(
    body: OtherDepotsQuery,
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """Other depots able to supply a stock line"""
    return await client.check_other_depots(body.stock_item, body.location, credentials)


# ==================== Orders ====================

@router.post("/orders", response_model=OrderResult)
async def place_order(
    order: OrderRequest,
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """
    Place a stock order.

    Not idempotent unless **idempotency_key** is supplied; an order_id of 0
    means nothing was ordered.
    """
    return await client.place_order(order, credentials)


# ==================== Diagnostics ====================

@router.get("/connection", response_model=ConnectionCheck)
async def test_connection(
    client: GlassCatalogClient = Depends(get_glass_client),
    credentials: Credentials = Depends(user_credentials),
):
    """HelloWorld round trip to the vendor"""
    return await client.test_connection(credentials)
