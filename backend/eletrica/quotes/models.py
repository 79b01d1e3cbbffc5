"""
Schémas partagés par les agrégats de devis (orçamentos et listes de matériel).
"""
from decimal import Decimal
from typing import Dict, Optional

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from eletrica.quotes.constants import DiscountType, QuoteStatus


class StatusUpdate(SQLModel):
    """Schéma pour changer le statut d'un agrégat."""
    status: QuoteStatus
    rejection_reason: Optional[str] = Field(default=None, max_length=500)


class DiscountApply(SQLModel):
    """Schéma pour appliquer une remise sur un orçamento."""
    discount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    discount_type: DiscountType
    discount_reason: Optional[str] = Field(default=None, max_length=255)


class PublicRejection(SQLModel):
    """Corps optionnel d'un refus envoyé depuis le lien public."""
    reason: Optional[str] = Field(default=None, max_length=500)


class DuplicateRequest(SQLModel):
    """Nom de l'agrégat créé par duplication."""
    name: str = Field(..., min_length=1, max_length=255)


class QuoteSummary(SQLModel):
    """Synthèse des agrégats d'un professionnel."""
    total: int = 0
    by_status: Dict[str, int] = {}
    approved_value: Decimal = Decimal("0.00")
    pending_value: Decimal = Decimal("0.00")

    model_config = ConfigDict(from_attributes=True)
