import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import NotFoundError
from app.models import Setting

logger = logging.getLogger(__name__)


def default_settings(config: Settings) -> List[dict]:
    return [
        {"key": "company_name", "value": config.APP_NAME, "description": "Company name"},
        {"key": "company_address", "value": "", "description": "Company address"},
        {"key": "company_phone", "value": "", "description": "Company phone number"},
        {"key": "gst_number", "value": "", "description": "GST registration number"},
        {"key": "currency", "value": "INR", "description": "Default currency"},
        {
            "key": "default_tax_percentage",
            "value": str(config.DEFAULT_TAX_PERCENTAGE),
            "description": "Default tax percentage",
        },
        {"key": "low_stock_threshold", "value": "5", "description": "Low stock alert threshold"},
    ]


def seed_default_settings(db: Session, config: Settings) -> int:
    """Insert the default rows when the settings table is empty."""
    if db.query(Setting.id).first() is not None:
        return 0
    rows = default_settings(config)
    db.add_all(Setting(**row) for row in rows)
    db.commit()
    logger.info("Seeded %s default settings", len(rows))
    return len(rows)


def list_settings(db: Session) -> List[Setting]:
    return db.query(Setting).order_by(Setting.key).all()


def get_setting(db: Session, key: str) -> Setting:
    setting = db.query(Setting).filter(Setting.key == key).first()
    if not setting:
        raise NotFoundError(f"Setting {key} not found")
    return setting
