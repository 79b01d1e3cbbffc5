"""Fonctions utilitaires partagées entre les modules."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Horodatage UTC avec fuseau, pour les colonnes TIMESTAMP WITH TIME ZONE."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Ramène une date en UTC avec fuseau; les dates naïves sont supposées UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
