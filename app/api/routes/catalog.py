"""Catalog listing routes."""

import asyncio

from fastapi import APIRouter, Depends

from app.api.schemas import CatalogResponse, ProductResponse, UserResponse
from app.dependencies import get_catalog
from app.ports.catalog import CatalogPort

router = APIRouter(tags=["Catalog"])


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog_listing(
    catalog: CatalogPort = Depends(get_catalog),
) -> CatalogResponse:
    """List all products and users, each ordered by name."""
    products, users = await asyncio.gather(catalog.list_products(), catalog.list_users())
    return CatalogResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        users=[UserResponse.model_validate(u) for u in users],
    )
