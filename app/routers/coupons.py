from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..core.dependencies import get_current_admin, get_db
from ..schemas.coupon import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
    GeneratedCodeResponse,
)
from ..services.coupon_service import coupon_ledger


router = APIRouter()
admin_only = Depends(get_current_admin)


@router.post("/validate", response_model=CouponValidateResponse)
async def validate_coupon(data: CouponValidateRequest, db: AsyncSession = Depends(get_db)):
    """
    **Validate a Coupon**

    Checks whether a code can be applied right now. Codes are case-insensitive.

    - Unknown, inactive and expired codes all answer **400 Invalid Coupon**.
    - A code that has used up its limit answers **409 Coupon Limit**.
    """

    coupon = await coupon_ledger.validate(data.code, db)
    return CouponValidateResponse(
        description=f"{coupon.discount_percent}% discount applied.",
        coupon=coupon,
    )


@router.get("/generate-code", dependencies=[admin_only], response_model=GeneratedCodeResponse)
async def generate_coupon_code():
    """
    Suggest a random 8 character code for a new coupon.
    """
    return GeneratedCodeResponse(code=coupon_ledger.generate_code())


@router.get("/", dependencies=[admin_only], response_model=List[CouponResponse])
async def list_coupons(db: AsyncSession = Depends(get_db)):
    """
    List every coupon, newest first.
    """
    return await coupon_ledger.list_coupons(db)


@router.post("/", dependencies=[admin_only], response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(data: CouponCreate, db: AsyncSession = Depends(get_db)):
    """
    Create a coupon. The code is stored uppercase and must be unique.
    """
    return await coupon_ledger.create_coupon(data, db)


@router.get("/{coupon_id}", dependencies=[admin_only], response_model=CouponResponse)
async def get_coupon(coupon_id: int = Path(..., description="ID of the coupon"), db: AsyncSession = Depends(get_db)):
    return await coupon_ledger.get_coupon(coupon_id, db)


@router.patch("/{coupon_id}", dependencies=[admin_only], response_model=CouponResponse)
async def update_coupon(
    data: CouponUpdate,
    coupon_id: int = Path(..., description="ID of the coupon"),
    db: AsyncSession = Depends(get_db),
):
    """
    Update any subset of a coupon's fields.
    """
    return await coupon_ledger.update_coupon(coupon_id, data, db)


@router.post("/{coupon_id}/toggle", dependencies=[admin_only], response_model=CouponResponse)
async def toggle_coupon(coupon_id: int = Path(..., description="ID of the coupon"), db: AsyncSession = Depends(get_db)):
    """
    Switch a coupon on or off without touching its validity window.
    """
    return await coupon_ledger.toggle_active(coupon_id, db)


@router.delete("/{coupon_id}", dependencies=[admin_only], status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(coupon_id: int = Path(..., description="ID of the coupon"), db: AsyncSession = Depends(get_db)):
    await coupon_ledger.delete_coupon(coupon_id, db)
