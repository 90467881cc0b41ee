"""API Client Module
=================

Access tokens, GraphQL queries and kit builds against the Font Awesome API.
"""

from .auth import AccessTokenManager
from .client import QueryClient, has_any_error, is_authorization_error
from .kit_build import KitBuild, create_kit_build, fetch_kit_metadata

__all__ = [
    "AccessTokenManager",
    "KitBuild",
    "QueryClient",
    "create_kit_build",
    "fetch_kit_metadata",
    "has_any_error",
    "is_authorization_error",
]
