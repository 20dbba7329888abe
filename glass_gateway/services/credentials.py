# -*- coding: utf-8 -*-
"""
Vendor credential resolution
"""
import logging
from typing import Optional, Dict

from pydantic import ValidationError

from glass_gateway.config import get_settings, Settings, ConfigurationError, DEMO_CREDENTIALS
from glass_gateway.models import Credentials

logger = logging.getLogger(__name__)


class CredentialProvider:
    """
    Resolves the SecureHeader credentials for a call.

    Lookup order: explicit override, per-user mapping (multi-tenant mode only),
    configured default account, built-in demo account (development only).
    """

    def __init__(self, settings: Settings = None):
        self.settings = settings or get_settings()
        self.single_tenant = self.settings.MAG_SINGLE_TENANT
        self._default = self._load_default()
        self._user_credentials = self._load_user_credentials()

        if self.single_tenant:
            logger.info(
                f"Single-tenant mode: all users share vendor account {self._default.login}"
            )

    def _load_default(self) -> Credentials:
        s = self.settings
        login = s.MAG_LOGIN
        password = s.MAG_PASSWORD.get_secret_value()
        user_id = s.MAG_USER_ID

        if s.is_production:
            missing = [
                name for name, value in (
                    ("MAG_LOGIN", login),
                    ("MAG_PASSWORD", password),
                    ("MAG_USER_ID", user_id),
                )
                if not value
            ]
            if missing:
                raise ConfigurationError(
                    f"Vendor credentials not configured in production: {', '.join(missing)}"
                )
        elif not (login and password and user_id):
            logger.warning("MAG credentials incomplete, filling gaps from the shared demo account")

        return Credentials(
            login=login or DEMO_CREDENTIALS["login"],
            password=password or DEMO_CREDENTIALS["password"],
            user_id=user_id or DEMO_CREDENTIALS["user_id"],
        )

    def _load_user_credentials(self) -> Dict[str, Credentials]:
        mapping = {}
        for email, raw in self.settings.MAG_USER_CREDENTIALS.items():
            try:
                mapping[email.strip().lower()] = Credentials(**raw)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid vendor credentials for {email}: {e}") from e
        if mapping:
            logger.info(f"Loaded vendor credentials for {len(mapping)} users")
        return mapping

    @property
    def default(self) -> Credentials:
        return self._default

    def resolve(self, override: Credentials = None, user_email: Optional[str] = None) -> Credentials:
        """
        Get credentials for a call. Never raises.

        Args:
            override: Explicit per-call credentials
            user_email: Authenticated platform user, mapped when multi-tenant

        Returns:
            Complete Credentials
        """
        if override is not None:
            return override

        if user_email and not self.single_tenant:
            mapped = self._user_credentials.get(user_email.strip().lower())
            if mapped is not None:
                logger.debug(f"Using mapped vendor credentials for {user_email}")
                return mapped
            logger.info(f"No vendor credentials mapped for {user_email}, using default account")

        return self._default


# Singleton instance
_credential_provider: Optional[CredentialProvider] = None


def get_credential_provider() -> CredentialProvider:
    """Get credential provider singleton"""
    global _credential_provider
    if _credential_provider is None:
        _credential_provider = CredentialProvider()
    return _credential_provider
