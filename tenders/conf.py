"""Accès aux paramètres de rotation du coffre (`settings.TENDER_VAULT`)."""
from datetime import timedelta

from django.conf import settings

DEFAULTS = {
    "DISPLAY_HOURS": 12,
    "COOLDOWN_DAYS": 60,
    "BATCH_MIN": 30,
    "BATCH_MAX": 70,
    "PUBLIC_ID_ATTEMPTS": 10,
    "LOCK_TTL_MINUTES": 90,
}


def vault_setting(name: str):
    overrides = getattr(settings, "TENDER_VAULT", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]


def display_duration() -> timedelta:
    return timedelta(hours=vault_setting("DISPLAY_HOURS"))


def cooldown() -> timedelta:
    return timedelta(days=vault_setting("COOLDOWN_DAYS"))
