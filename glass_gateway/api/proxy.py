# -*- coding: utf-8 -*-
"""
Same-origin SOAP proxy

Browsers cannot read pdaservice.asmx responses (no CORS headers), so browser
clients post their envelope here and the server relays it verbatim.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from glass_gateway.services import SoapTransport, SoapTimeoutError, SoapTransportError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])

_transport: SoapTransport = None


def get_proxy_transport() -> SoapTransport:
    """Transport used to reach the vendor"""
    global _transport
    if _transport is None:
        _transport = SoapTransport()
    return _transport


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/glass-proxy")
async def glass_proxy(request: Request, transport: SoapTransport = Depends(get_proxy_transport)):
    """
    Forward a SOAP envelope to the vendor.

    Requires the SOAPAction header and a non-empty body. The vendor's raw XML
    comes back with the vendor's status code.
    """
    soap_action = request.headers.get("soapaction")
    if not soap_action:
        return _error(400, "Missing SOAPAction header")

    envelope = await request.body()
    if not envelope.strip():
        logger.error("Missing or empty SOAP envelope body")
        return _error(400, "Missing or empty request body (SOAP envelope)")

    logger.info(f"SOAP proxy: forwarding {soap_action}")

    try:
        upstream = await transport.forward(envelope, soap_action)
    except SoapTimeoutError as e:
        return _error(504, e.message)
    except SoapTransportError as e:
        return _error(502, e.message)

    if upstream.is_success:
        logger.info(f"SOAP proxy: upstream responded {upstream.status_code}")
    else:
        logger.error(f"SOAP proxy: upstream error {upstream.status_code}: {upstream.text[:200]}")

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type="text/xml; charset=utf-8",
    )
