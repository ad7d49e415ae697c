"""
Identity Core - Credentials, bearer tokens and user accounts.
"""

from src.kernel.identity.password import PasswordHasher, verify_password, hash_password
from src.kernel.identity.jwt import JWTManager, TokenClaims
from src.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "TokenClaims",
    "IdentityService",
]
