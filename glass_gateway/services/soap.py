# -*- coding: utf-8 -*-
"""
SOAP 1.1 transport for the Master Auto Glass pdaservice.asmx API
"""
import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional, Dict, List, Union
from xml.sax.saxutils import escape

import httpx

from glass_gateway.config import get_settings
from glass_gateway.models import CallResult, CallStatus, Credentials

logger = logging.getLogger(__name__)


class SoapError(Exception):
    """Base SOAP error. Always raised, never returned to callers."""
    def __init__(self, message: str, status_code: int = None, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class SoapTransportError(SoapError):
    """HTTP exchange failed (connection error or non-2xx status)"""

    @property
    def body(self) -> str:
        return self.details.get("body", "")


class SoapTimeoutError(SoapTransportError):
    """Vendor did not answer within the configured timeout"""


class SoapParseError(SoapError):
    """Response body is not well-formed XML"""


class SoapFaultError(SoapError):
    """Response carried a soap:Fault element"""
    def __init__(self, fault_string: str, fault_code: str = "", status_code: int = None):
        self.fault_string = fault_string
        self.fault_code = fault_code
        super().__init__(
            f"SOAP Fault: {fault_string}",
            status_code,
            {"faultcode": fault_code, "faultstring": fault_string},
        )


ENVELOPE_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
               xmlns:xsd="http://www.w3.org/2001/XMLSchema"
               xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Header>
    <SecureHeader xmlns="{namespace}">
      <Login>{login}</Login>
      <Password>{password}</Password>
      <UserID>{user_id}</UserID>
    </SecureHeader>
  </soap:Header>
  <soap:Body>
    {body}
  </soap:Body>
</soap:Envelope>"""

_PASSWORD_RE = re.compile(r"<Password>.*?</Password>", re.DOTALL)


def build_envelope(body_xml: str, credentials: Credentials, namespace: str) -> str:
    """
    Wrap an action body in the SOAP envelope with the SecureHeader block.

    Credential values are XML-escaped; the body is expected to be escaped
    already by its builder.
    """
    return ENVELOPE_TEMPLATE.format(
        namespace=escape(namespace, {'"': "&quot;"}),
        login=escape(credentials.login),
        password=escape(credentials.password.get_secret_value()),
        user_id=int(credentials.user_id),
        body=body_xml,
    )


def redact_envelope(envelope: str) -> str:
    """Hide password values before an envelope is logged"""
    return _PASSWORD_RE.sub("<Password>REDACTED</Password>", envelope)


def local_name(tag: str) -> str:
    """Strip the {namespace} prefix ElementTree puts on tags"""
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    return tag


class SoapDocument:
    """Parsed SOAP response with namespace-agnostic lookups"""

    def __init__(self, root: ET.Element):
        self.root = root

    def find_all(self, name: str, parent: ET.Element = None) -> List[ET.Element]:
        """All descendants (document order) whose local tag name is ``name``"""
        scope = self.root if parent is None else parent
        return [el for el in scope.iter() if local_name(el.tag) == name]

    def find(self, name: str, parent: ET.Element = None) -> Optional[ET.Element]:
        """First descendant whose local tag name is ``name``"""
        scope = self.root if parent is None else parent
        for el in scope.iter():
            if local_name(el.tag) == name:
                return el
        return None

    def text(self, name: str, default: str = "", parent: ET.Element = None) -> str:
        el = self.find(name, parent)
        if el is None or el.text is None:
            return default
        return el.text.strip()

    def call_result(self) -> CallResult:
        """Read the first Status/ErrorMessage pair in the response"""
        raw_status = self.text("Status")
        error_message = self.text("ErrorMessage")

        if not raw_status:
            return CallResult(status=CallStatus.NONE, error_message=error_message)
        try:
            status = CallStatus(raw_status)
        except ValueError:
            status = CallStatus.SYSTEM_ERROR
            error_message = error_message or f"Unrecognised vendor status: {raw_status}"
        return CallResult(status=status, error_message=error_message)


def parse_response(content: Union[bytes, str], status_code: int = None) -> SoapDocument:
    """Parse a SOAP response body, raising on malformed XML or soap:Fault"""
    if isinstance(content, str):
        content = content.encode("utf-8")
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        logger.error(f"XML parsing error: {e}")
        raise SoapParseError(f"Failed to parse XML response: {e}", status_code) from e

    doc = SoapDocument(root)
    fault = doc.find("Fault")
    if fault is not None:
        fault_string = doc.text("faultstring", parent=fault) or "Unknown SOAP fault"
        fault_code = doc.text("faultcode", parent=fault)
        logger.error(f"SOAP Fault ({fault_code}): {fault_string}")
        raise SoapFaultError(fault_string, fault_code, status_code)

    return doc


class SoapTransport:
    """HTTP exchange with pdaservice.asmx, directly or through the proxy route"""

    def __init__(self, http_transport: httpx.AsyncBaseTransport = None):
        self.settings = get_settings()
        self.namespace = self.settings.MAG_NAMESPACE
        self.timeout = self.settings.MAG_TIMEOUT
        # Injected by tests (httpx.MockTransport)
        self._http_transport = http_transport

    def _endpoint(self, mode: str) -> str:
        if mode == "direct":
            return self.settings.MAG_API_URL
        if mode == "proxy":
            return self.settings.MAG_PROXY_URL
        raise ValueError(f"Unsupported transport mode: {mode}")

    def soap_action(self, action: str) -> str:
        return f"{self.namespace}/{action}"

    def _get_headers(self, soap_action: str) -> Dict[str, str]:
        return {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": soap_action,
            "Accept": "text/xml",
        }

    def build_envelope(self, body_xml: str, credentials: Credentials) -> str:
        return build_envelope(body_xml, credentials, self.namespace)

    async def _post(self, url: str, content: bytes, soap_action: str) -> httpx.Response:
        """POST once. Connection failures and timeouts become SoapTransportError."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._http_transport
            ) as client:
                return await client.post(
                    url, headers=self._get_headers(soap_action), content=content
                )
        except httpx.TimeoutException as e:
            logger.warning(f"SOAP timeout after {self.timeout}s: {url}")
            raise SoapTimeoutError(
                f"Request timed out after {self.timeout} seconds", details={"url": url}
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"SOAP request error: {e}")
            raise SoapTransportError(f"Request error: {e}", details={"url": url}) from e

    async def forward(self, content: bytes, soap_action: str) -> httpx.Response:
        """
        Relay a ready-made envelope to the vendor untouched.

        Used by the proxy route; the response status is not inspected.
        """
        return await self._post(self.settings.MAG_API_URL, content, soap_action)

    async def send(
        self,
        action: str,
        body_xml: str,
        credentials: Credentials,
        mode: str = None,
    ) -> SoapDocument:
        """
        Send one SOAP action and return the parsed response.

        Args:
            action: Vendor action name, e.g. "GetDepots"
            body_xml: Action element rendered by its body builder
            credentials: SecureHeader values
            mode: "direct" or "proxy" (defaults to MAG_TRANSPORT_MODE)

        Returns:
            SoapDocument

        Raises:
            SoapTimeoutError, SoapTransportError, SoapParseError, SoapFaultError
        """
        mode = mode or self.settings.MAG_TRANSPORT_MODE
        url = self._endpoint(mode)
        envelope = self.build_envelope(body_xml, credentials)

        logger.info(f"SOAP request: {action} via {mode}")
        logger.debug(f"SOAP request envelope: {redact_envelope(envelope)}")

        response = await self._post(url, envelope.encode("utf-8"), self.soap_action(action))
        logger.info(f"SOAP response status: {response.status_code} ({action})")

        if not response.is_success:
            logger.error(f"SOAP error response body: {response.text[:500]}")
            raise SoapTransportError(
                f"SOAP request failed: {response.status_code} - {response.text}",
                response.status_code,
                {"body": response.text, "action": action},
            )

        logger.debug(f"SOAP response text (first 500 chars): {response.text[:500]}")
        return parse_response(response.content, response.status_code)
