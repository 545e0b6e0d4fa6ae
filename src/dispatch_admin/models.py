from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProviderLocation(BaseModel):
    lat: float | None = None
    lng: float | None = None
    updated_at: str | None = None


class Provider(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    full_name: str = ""
    phone: str | None = None
    vehicle_type: str | None = None
    vehicle_plate: str | None = None
    rating: float | None = None
    total_jobs: int = 0
    status: str = "approved"
    is_online: bool = False
    current_location: ProviderLocation = Field(default_factory=ProviderLocation)


class ReassignmentResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    order_id: str | None = None
    order_type: str | None = None
    old_provider_id: str | None = None
    new_provider_id: str | None = None
    reassigned_by: str | None = None
    reassigned_at: str | None = None


class ReassignmentHistoryEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    order_id: str
    order_type: str
    old_provider_id: str | None = None
    old_provider_name: str | None = None
    new_provider_id: str
    new_provider_name: str | None = None
    reassigned_by: str | None = None
    admin_name: str | None = None
    reason: str | None = None
    notes: str | None = None
    created_at: str


class SuspensionResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    customer_id: str | None = None
    status: str | None = None
    suspended_at: str | None = None
