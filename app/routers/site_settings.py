from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_current_admin, get_db
from ..schemas.site_settings import SiteSettingResponse, SiteSettingsMap, SiteSettingValue
from ..services.site_settings_service import site_settings_service


router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/", response_model=SiteSettingsMap)
async def get_site_settings(db: AsyncSession = Depends(get_db)):
    """
    Every site setting as a flat key/value map.
    """
    return SiteSettingsMap(settings=await site_settings_service.get_all(db))


@router.put("/{key}", response_model=SiteSettingResponse)
async def put_site_setting(
    data: SiteSettingValue,
    key: str = Path(..., description="Setting key, e.g. booking_popup_enabled"),
    db: AsyncSession = Depends(get_db),
):
    """
    Create or overwrite a setting. Subscribers of `/ws/site-settings` are notified.
    """
    setting = await site_settings_service.set(key, data.value, db)
    return SiteSettingResponse(key=setting.key, value=setting.value)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_site_setting(key: str = Path(...), db: AsyncSession = Depends(get_db)):
    await site_settings_service.delete(key, db)
