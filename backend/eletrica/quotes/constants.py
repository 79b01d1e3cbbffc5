"""
Constantes du moteur de devis (orçamentos et listes de matériel).
"""
from enum import Enum


class QuoteStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


ALLOWED_QUOTE_STATUS = [s.value for s in QuoteStatus]

# Seul statut autorisant la modification des items, remises et champs descriptifs
EDITABLE_STATUS = QuoteStatus.PENDING

# Statuts visibles par le client sur le portail public
PUBLIC_VISIBLE_STATUS = [QuoteStatus.PENDING, QuoteStatus.APPROVED]

DEFAULT_ITEM_UNIT = "UNIT"

# --- Libellés par défaut (données visibles par le client final) ---
DERIVED_LIST_NAME_TEMPLATE = "Lista de Materiais - {budget_name}"
DERIVED_LIST_NOTES_TEMPLATE = "Criada a partir do orçamento: {budget_name}"
