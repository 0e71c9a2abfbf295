"""License endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from backend.app.api.deps import get_data_access
from backend.app.tenancy.scoped import TenantScopedDataAccess

router = APIRouter(prefix="/licenses", tags=["licenses"])


class CreateLicenseRequest(BaseModel):
    """Request body for POST /licenses."""

    number: str = Field(..., min_length=1, max_length=64)
    holder_name: str | None = None
    expires_at: datetime | None = None


class LicenseResponse(BaseModel):
    """License as returned to clients."""

    id: str
    tenant_id: str
    number: str
    holder_name: str | None
    status: str
    expires_at: datetime | None
    created_at: datetime | None = None


@router.get("", response_model=list[LicenseResponse])
async def list_licenses(
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> list[LicenseResponse]:
    records = await access.license.find(order_by="number")
    return [LicenseResponse.model_validate(r) for r in records]


@router.post("", response_model=LicenseResponse, status_code=status.HTTP_201_CREATED)
async def create_license(
    request: CreateLicenseRequest,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> LicenseResponse:
    try:
        record = await access.license.create(request.model_dump())
    except IntegrityError as e:
        # (tenant_id, number) is unique per tenant.
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="License number already registered",
        ) from e
    return LicenseResponse.model_validate(record)


@router.get("/{license_id}", response_model=LicenseResponse)
async def get_license(
    license_id: str,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> LicenseResponse:
    record = await access.license.get(license_id)
    return LicenseResponse.model_validate(record)
