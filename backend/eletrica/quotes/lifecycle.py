"""
Règles de cycle de vie des agrégats de devis et de mutation des items.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from eletrica.quotes.calculations import compute_item_total, to_decimal
from eletrica.quotes.constants import DEFAULT_ITEM_UNIT, EDITABLE_STATUS, QuoteStatus
from eletrica.quotes.exceptions import QuoteStateConflictException, QuoteValidationException
from eletrica.utils import utcnow

logger = logging.getLogger(__name__)

# Champs copiés depuis l'entrée du catalogue: champ de l'item -> attribut du catalogue
CATALOG_SNAPSHOT_FIELDS = {"name": "name", "unit_price": "price", "unit": "unit"}

# Champs d'item qui ne peuvent pas être remis à NULL par une mise à jour partielle
NON_NULLABLE_ITEM_FIELDS = ("name", "quantity", "unit_price", "unit")


def ensure_editable(aggregate, entity_label: str) -> None:
    """Lève QuoteStateConflictException si l'agrégat n'est pas PENDING."""
    current = QuoteStatus(aggregate.status)
    if current != EDITABLE_STATUS:
        logger.warning(f"{entity_label} ID {aggregate.id} non modifiable (statut {current.value}).")
        raise QuoteStateConflictException(entity_label, aggregate.id, current.value)


def apply_status_transition(
    aggregate,
    new_status: Union[QuoteStatus, str],
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """
    Applique une transition de statut et les horodatages associés.

    La transition n'est pas conditionnée par le statut courant. Après l'appel,
    au plus un de `approved_at` / `rejected_at` est renseigné.
    """
    status = QuoteStatus(new_status)
    moment = now or utcnow()
    aggregate.status = status
    if status == QuoteStatus.APPROVED:
        aggregate.approved_at = moment
        aggregate.rejected_at = None
        aggregate.rejection_reason = None
    elif status == QuoteStatus.REJECTED:
        aggregate.rejected_at = moment
        aggregate.approved_at = None
        aggregate.rejection_reason = rejection_reason
    else:
        aggregate.approved_at = None
        aggregate.rejected_at = None
        aggregate.rejection_reason = None


def snapshot_catalog_fields(values: Dict[str, Any], catalog_entry) -> Dict[str, Any]:
    """Copie nom, prix et unité de l'entrée catalogue sauf valeurs fournies explicitement."""
    for item_field, catalog_attr in CATALOG_SNAPSHOT_FIELDS.items():
        if values.get(item_field) is None:
            value = getattr(catalog_entry, catalog_attr)
            values[item_field] = getattr(value, "value", value)
    return values


def finalize_item_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """Vérifie les champs obligatoires d'un nouvel item et calcule son prix total."""
    if not values.get("name"):
        raise QuoteValidationException("Le nom de l'item est obligatoire sans référence au catalogue.")
    if values.get("unit_price") is None:
        raise QuoteValidationException("Le prix unitaire est obligatoire sans référence au catalogue.")
    if values.get("quantity") is None or to_decimal(values["quantity"]) <= 0:
        raise QuoteValidationException("La quantité doit être supérieure à zéro.")
    if to_decimal(values["unit_price"]) < 0:
        raise QuoteValidationException("Le prix unitaire ne peut pas être négatif.")
    if not values.get("unit"):
        values["unit"] = DEFAULT_ITEM_UNIT
    values["total_price"] = compute_item_total(values["quantity"], values["unit_price"])
    return values


def apply_item_patch(item, patch: Dict[str, Any]) -> None:
    """
    Applique une mise à jour partielle sur un item.

    Si `quantity` ou `unit_price` est présent, le prix total est recalculé avec
    les valeurs effectives (valeur du patch sinon valeur stockée).
    """
    for field, value in patch.items():
        if value is None and field in NON_NULLABLE_ITEM_FIELDS:
            continue
        setattr(item, field, value)
    if patch.get("quantity") is not None or patch.get("unit_price") is not None:
        item.total_price = compute_item_total(item.quantity, item.unit_price)
    item.updated_at = utcnow()
