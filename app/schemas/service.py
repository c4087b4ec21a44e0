from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    display_order: int = 0
    is_active: bool = True
    is_visible: bool = True


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    is_visible: Optional[bool] = None


class ServiceResponse(ServiceBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookableServiceResponse(BaseModel):
    """What the booking widget needs to list a service."""
    id: int
    name: str
    price: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
