"""
FastAPI dependencies for authentication and service wiring.
"""

from typing import Annotated, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.kernel.contacts.contact_service import ContactService
from src.kernel.errors import AuthError, AuthErrorKind
from src.kernel.identity.identity_service import IdentityService
from src.kernel.identity.jwt import JWTManager, TokenClaims
from src.kernel.projects.project_service import ProjectService
from src.kernel.store import DEFAULT_LIMIT, DEFAULT_OFFSET, DocumentStore, Pagination
from src.logging_config import get_logger

logger = get_logger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    """The process-wide document store created at startup."""
    return request.app.state.store


def get_jwt_manager(request: Request) -> JWTManager:
    return request.app.state.jwt_manager


Store = Annotated[DocumentStore, Depends(get_store)]
Tokens = Annotated[JWTManager, Depends(get_jwt_manager)]


async def get_current_identity(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    jwt_manager: Tokens,
) -> TokenClaims:
    """
    Resolve the bearer token to an identity or reject the request with 401.

    The identity is also stored on request.state for anything downstream.
    """
    if not credentials:
        raise AuthError(AuthErrorKind.MALFORMED, "Not authenticated", "No bearer token")

    try:
        identity = jwt_manager.validate_token(credentials.credentials)
    except AuthError as e:
        logger.info(
            "Rejected bearer token",
            extra={"kind": e.kind.value, "path": request.url.path},
        )
        raise

    request.state.identity = identity
    return identity


CurrentIdentity = Annotated[TokenClaims, Depends(get_current_identity)]


def get_pagination(
    offset: int = Query(DEFAULT_OFFSET, ge=0),
    limit: int = Query(DEFAULT_LIMIT, ge=0),
) -> Pagination:
    return Pagination(offset=offset, limit=limit)


Page = Annotated[Pagination, Depends(get_pagination)]


def get_identity_service(store: Store, jwt_manager: Tokens) -> IdentityService:
    return IdentityService(store, jwt_manager)


def get_project_service(store: Store) -> ProjectService:
    return ProjectService(store)


def get_contact_service(store: Store) -> ContactService:
    return ContactService(store)


Identities = Annotated[IdentityService, Depends(get_identity_service)]
Projects = Annotated[ProjectService, Depends(get_project_service)]
Contacts = Annotated[ContactService, Depends(get_contact_service)]
