"""Health check endpoints."""

from fastapi import APIRouter

from fastgrapher.api.schemas.models import CapabilitySchema, ModelsSchema
from fastgrapher.api.services.state import get_capabilities

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Lightweight health endpoint used by containers and dev tooling."""

    return {"status": "ok"}


@router.get("/health/models", response_model=ModelsSchema)
def models() -> ModelsSchema:
    """Report which detector backends loaded at startup."""

    return ModelsSchema(
        models=[
            CapabilitySchema(name=c.name, available=c.available, error=c.error)
            for c in get_capabilities()
        ]
    )
