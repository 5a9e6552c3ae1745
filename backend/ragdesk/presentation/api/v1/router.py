"""Version 1 of the HTTP API, mounted under /api/v1."""

from fastapi import APIRouter

from ragdesk.presentation.api.v1.endpoints import (
    consent,
    data_requests,
    documents,
    health,
    search,
)

router = APIRouter(prefix="/api/v1")

for endpoint in (health, documents, search, data_requests, consent):
    router.include_router(endpoint.router)
