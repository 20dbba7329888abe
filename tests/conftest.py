"""Pytest fixtures for the glass gateway."""
import logging

import pytest

from glass_gateway.config import get_settings
from glass_gateway.models import Credentials
from glass_gateway.services import SoapTransport, CredentialProvider, GlassCatalogClient
from soap_fixtures import FakeVendor

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    """Deterministic vendor settings, isolated from the developer's environment"""
    monkeypatch.setenv("ENV", "development")
    monkeypatch.setenv("MAG_API_URL", "https://vendor.test/pdaservice.asmx")
    monkeypatch.setenv("MAG_NAMESPACE", "https://www.master-auto-glass.co.uk/pdaservice.asmx")
    monkeypatch.setenv("MAG_PROXY_URL", "http://gateway.test/api/glass-proxy")
    monkeypatch.setenv("MAG_TRANSPORT_MODE", "direct")
    monkeypatch.setenv("MAG_TIMEOUT", "5")
    monkeypatch.setenv("MAG_LOGIN", "TECH-7")
    monkeypatch.setenv("MAG_PASSWORD", "pa&ss<word>")
    monkeypatch.setenv("MAG_USER_ID", "7")
    monkeypatch.delenv("MAG_SINGLE_TENANT", raising=False)
    monkeypatch.delenv("MAG_USER_CREDENTIALS", raising=False)

    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def creds() -> Credentials:
    return Credentials(login="Q-200", password="secret", user_id=3)


@pytest.fixture
def vendor() -> FakeVendor:
    return FakeVendor()


@pytest.fixture
def transport(vendor) -> SoapTransport:
    return SoapTransport(http_transport=vendor.transport())


@pytest.fixture
def client(transport) -> GlassCatalogClient:
    return GlassCatalogClient(transport=transport, credentials=CredentialProvider())
