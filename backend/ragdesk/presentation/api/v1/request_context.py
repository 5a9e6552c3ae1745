"""Per-request context shared by endpoints: acting identity, origin, error mapping."""

from fastapi import Header, HTTPException, Request, status

from ragdesk.domain.entities import RequestOrigin
from ragdesk.domain.exceptions import (
    ConcurrentModificationError,
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidStateTransition,
    ProviderError,
    ValidationError,
)


def get_actor_id(x_actor_id: str | None = Header(None)) -> str:
    """Identity of the caller. Authentication itself happens upstream."""
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_actor_id.strip()


def get_request_origin(request: Request) -> RequestOrigin:
    """Client IP (proxy headers first) and user agent for the audit trail."""
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = (
        forwarded.split(",")[0].strip() if forwarded else None
    ) or request.headers.get("x-real-ip") or (request.client.host if request.client else None)
    return RequestOrigin(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
    )


def to_http_exception(exc: Exception) -> HTTPException:
    """Map a domain exception to the HTTP status the API promises."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (DuplicateEntityError, InvalidStateTransition, ConcurrentModificationError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ProviderError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
    )


DOMAIN_ERRORS = (
    ValidationError,
    EntityNotFoundError,
    DuplicateEntityError,
    InvalidStateTransition,
    ConcurrentModificationError,
    ProviderError,
)
