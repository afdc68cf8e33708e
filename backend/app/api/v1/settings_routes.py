from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas.common import Envelope
from app.schemas.setting import SettingOut
from app.services.settings_service import get_setting, list_settings

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[List[SettingOut]],
    summary="List application settings",
)
def list_settings_api(db: Session = Depends(get_db)):
    rows = list_settings(db)
    return {"data": rows, "count": len(rows)}


@router.get(
    "/{key}",
    response_model=Envelope[SettingOut],
    summary="Get one setting by key",
)
def get_setting_api(key: str, db: Session = Depends(get_db)):
    return {"data": get_setting(db, key)}
