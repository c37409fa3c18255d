"""
Salesforce integration.

- token_provider: client-credentials token cache
- client: flow, agent session and event router endpoints
- models: typed response views
"""

from backend.crm.client import CRMClient, close_http_client, get_crm_client, get_token_provider
from backend.crm.token_provider import Credential, TokenProvider

__all__ = [
    "CRMClient",
    "Credential",
    "TokenProvider",
    "close_http_client",
    "get_crm_client",
    "get_token_provider",
]
