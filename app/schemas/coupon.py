from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime


def normalize_code(code: str) -> str:
    """Coupon codes are case-insensitive and stored uppercase."""
    return code.strip().upper()


class CouponBase(BaseModel):
    """Base schema for coupons"""
    code: str = Field(..., min_length=1, max_length=50)
    discount_percent: int = Field(..., ge=1, le=100, description="Whole-number percentage taken off the service price")
    valid_from: Optional[datetime] = Field(None, description="Defaults to the creation time")
    valid_until: datetime
    max_uses: Optional[int] = Field(None, gt=0, description="Leave empty for unlimited use")
    is_active: bool = True

    @field_validator('code')
    @classmethod
    def uppercase_code(cls, v):
        v = normalize_code(v)
        if not v:
            raise ValueError('Coupon code cannot be blank')
        return v

class CouponCreate(CouponBase):
    """Schema for creating coupons"""
    pass

class CouponUpdate(BaseModel):
    """Schema for updating coupons"""
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    discount_percent: Optional[int] = Field(None, ge=1, le=100)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    max_uses: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None

    @field_validator('code')
    @classmethod
    def uppercase_code(cls, v):
        if v is None:
            return v
        v = normalize_code(v)
        if not v:
            raise ValueError('Coupon code cannot be blank')
        return v

class CouponResponse(CouponBase):
    """Schema for coupon responses"""
    id: int
    current_uses: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CouponSnapshot(BaseModel):
    """The part of a coupon a booking needs once the code has been validated."""
    id: int
    code: str
    discount_percent: int
    current_uses: int = 0
    max_uses: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)


class CouponValidateResponse(BaseModel):
    title: str = "Coupon Applied!"
    description: str
    coupon: CouponSnapshot


class GeneratedCodeResponse(BaseModel):
    code: str
