"""Listing endpoints - tenant-scoped CRUD."""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator

from backend.app.api.deps import get_data_access, get_public_data_access
from backend.app.tenancy.scoped import TenantScopedDataAccess

router = APIRouter(prefix="/listings", tags=["listings"])


class CreateListingRequest(BaseModel):
    """Request body for POST /listings."""

    title: str = Field(..., min_length=1)
    status: str = "DRAFT"
    price_cents: int | None = Field(None, ge=0)
    broker_id: str | None = None


class UpdateListingRequest(BaseModel):
    """Request body for PATCH /listings/{listing_id}."""

    title: str | None = Field(None, min_length=1)
    status: str | None = None
    price_cents: int | None = Field(None, ge=0)

    @field_validator("title", "status")
    @classmethod
    def reject_null(cls, value: str | None) -> str:
        # Omit the field to leave it unchanged; the columns are NOT NULL.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ListingResponse(BaseModel):
    """Listing as returned to clients."""

    id: str
    tenant_id: str
    title: str
    status: str
    price_cents: int | None
    broker_id: str | None
    created_at: datetime | None = None


def _to_response(record: dict[str, Any]) -> ListingResponse:
    return ListingResponse.model_validate(record)


@router.get("", response_model=list[ListingResponse])
async def list_listings(
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> list[ListingResponse]:
    """List the tenant's listings, newest first."""
    where = {"status": status_filter} if status_filter else {}
    records = await access.listing.find(where, order_by="-created_at", offset=offset, limit=limit)
    return [_to_response(r) for r in records]


@router.get("/public", response_model=list[ListingResponse])
async def list_public_listings(
    access: Annotated[TenantScopedDataAccess, Depends(get_public_data_access)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> list[ListingResponse]:
    """Marketplace view of a tenant's published listings."""
    records = await access.listing.find({"status": "PUBLISHED"}, order_by="-created_at", limit=limit)
    return [_to_response(r) for r in records]


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    request: CreateListingRequest,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> ListingResponse:
    """Create a listing owned by the request's tenant."""
    record = await access.listing.create(request.model_dump())
    return _to_response(record)


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: str,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> ListingResponse:
    """Get one listing; 404 if missing or owned by another tenant."""
    record = await access.listing.get(listing_id)
    return _to_response(record)


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: str,
    request: UpdateListingRequest,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> ListingResponse:
    """Update a listing of the request's tenant."""
    record = await access.listing.update({"id": listing_id}, request.model_dump(exclude_unset=True))
    return _to_response(record)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing_id: str,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> None:
    """Delete a listing of the request's tenant."""
    await access.listing.delete({"id": listing_id})
