from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from powerdash.api.deps import get_backend
from powerdash.clients.base import PowerMeterBackend
from powerdash.core.errors import TransportError

router = APIRouter()


@router.get("/health", tags=["meta"])
def health(backend: Annotated[PowerMeterBackend, Depends(get_backend)]) -> dict[str, str]:
    try:
        backend.ping()
    except TransportError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Power meter API unavailable",
        ) from e
    return {"status": "ok"}
