# Glass Gateway Services
from .soap import (
    SoapTransport, SoapDocument, SoapError, SoapTransportError, SoapTimeoutError,
    SoapParseError, SoapFaultError, build_envelope, parse_response,
)
from .credentials import CredentialProvider, get_credential_provider
from .glass_catalog import GlassCatalogClient, get_glass_client

__all__ = [
    # Transport
    "SoapTransport",
    "SoapDocument",
    "SoapError",
    "SoapTransportError",
    "SoapTimeoutError",
    "SoapParseError",
    "SoapFaultError",
    "build_envelope",
    "parse_response",
    # Credentials
    "CredentialProvider",
    "get_credential_provider",
    # Catalog
    "GlassCatalogClient",
    "get_glass_client",
]
