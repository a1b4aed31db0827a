"""
Node Configuration
"""
from functools import lru_cache
from typing import Optional
import os

from pydantic import BaseModel, Field

from core.encryption import CipherSuite

DEFAULT_RPC_URL = "https://s.altnet.rippletest.net:51234"

# Environment variable -> settings field
ENV_VARS = {
    "XRPL_RPC_URL": "xrpl_rpc_url",
    "ISSUER_ADDRESS": "issuer_address",
    "AUDITOR_API_KEY": "auditor_api_key",
    "CERTICHAIN_CIPHER": "cipher",
    "LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Runtime settings, read from the environment"""
    xrpl_rpc_url: str = Field(default=DEFAULT_RPC_URL, description="rippled JSON-RPC endpoint")
    issuer_address: Optional[str] = Field(default=None, description="Credential issuer account")
    auditor_api_key: Optional[str] = Field(default=None, description="Key required by auditor routes")
    cipher: CipherSuite = Field(default=CipherSuite.AES_GCM, description="Cipher for new documents")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> 'Settings':
        environ = os.environ if environ is None else environ
        values = {field: environ[var] for var, field in ENV_VARS.items() if environ.get(var)}
        return cls(**values)


@lru_cache
def get_settings() -> Settings:
    """Dependency for getting the process-wide settings."""
    return Settings.from_env()
