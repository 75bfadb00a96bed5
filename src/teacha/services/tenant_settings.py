"""
Typed tenant settings record.

Tenant settings are stored as JSON text in ``tenants.settings`` and only
decoded/encoded here. Keys use the camelCase names clients send and receive.
"""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError, field_serializer
from pydantic.alias_generators import to_camel

from teacha.database.models import TenantPlan
from teacha.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PRIMARY_COLOR = "#3B82F6"
DEFAULT_CURRENCY = "USD"


class _SettingsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BrandingSettings(_SettingsModel):
    primary_color: Optional[str] = None
    logo: Optional[HttpUrl] = None
    favicon: Optional[HttpUrl] = None

    @field_serializer("logo", "favicon")
    def _url_to_str(self, value: Optional[HttpUrl]) -> Optional[str]:
        return str(value) if value is not None else None


class FeatureSettings(_SettingsModel):
    custom_domain: Optional[bool] = None
    analytics: Optional[bool] = None
    affiliates: Optional[bool] = None


class PaymentSettings(_SettingsModel):
    stripe_publishable_key: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class TenantSettings(_SettingsModel):
    """Branding, feature flags and payment configuration of a tenant."""

    branding: Optional[BrandingSettings] = None
    features: Optional[FeatureSettings] = None
    payment: Optional[PaymentSettings] = None


SECTIONS = ("branding", "features", "payment")


def default_settings(plan: TenantPlan) -> TenantSettings:
    """Settings a tenant starts with. Custom domains and affiliates depend on the plan."""
    plan = TenantPlan(plan)
    return TenantSettings(
        branding=BrandingSettings(primary_color=DEFAULT_PRIMARY_COLOR, logo=None, favicon=None),
        features=FeatureSettings(
            custom_domain=plan != TenantPlan.FREE,
            analytics=True,
            affiliates=plan == TenantPlan.PRO,
        ),
        payment=PaymentSettings(currency=DEFAULT_CURRENCY),
    )


def load_settings(text: Optional[str]) -> TenantSettings:
    """
    Decode stored settings.

    Empty or unreadable text yields an empty record so a damaged column never
    blocks reading the tenant.
    """
    if not text:
        return TenantSettings()
    try:
        return TenantSettings.model_validate_json(text)
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable tenant settings: {e.error_count()} error(s)")
        return TenantSettings()


def dump_settings(record: TenantSettings) -> str:
    """Encode settings for storage. Fields never set are left out."""
    return json.dumps(settings_to_dict(record))


def settings_to_dict(record: TenantSettings) -> Dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True, exclude_unset=True)


def merge_settings(current: TenantSettings, patch: TenantSettings) -> TenantSettings:
    """
    Apply a partial update.

    Each section is merged on its own: fields present in the patch replace
    the stored ones, everything else in the section is kept.
    """
    merged: Dict[str, Any] = {}
    for section in SECTIONS:
        existing = getattr(current, section)
        update = getattr(patch, section)
        if existing is None and update is None:
            continue
        values: Dict[str, Any] = {}
        if existing is not None:
            values.update(existing.model_dump(exclude_unset=True))
        if update is not None:
            values.update(update.model_dump(exclude_unset=True))
        merged[section] = values
    return TenantSettings.model_validate(merged)
