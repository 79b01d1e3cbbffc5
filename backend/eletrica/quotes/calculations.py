"""
Calculs monétaires des agrégats de devis.

Le sous-total est toujours recalculé à partir de la liste complète des items,
jamais incrémenté à partir d'une valeur mise en cache.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from eletrica.quotes.constants import DiscountType

Number = Union[Decimal, int, float, str]

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convertit une valeur numérique en Decimal (None devient 0)."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    # Passer par str évite les artefacts binaires des float
    return Decimal(str(value))


def quantize_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_item_total(quantity: Number, unit_price: Number) -> Decimal:
    """Prix total d'une ligne: quantité × prix unitaire."""
    return quantize_money(to_decimal(quantity) * to_decimal(unit_price))


def compute_subtotal(item_totals: Iterable[Number]) -> Decimal:
    """Somme des totaux de toutes les lignes courantes."""
    return quantize_money(sum((to_decimal(t) for t in item_totals), Decimal(0)))


def compute_discount_amount(
    subtotal: Number,
    discount: Optional[Number],
    discount_type: Optional[Union[DiscountType, str]],
) -> Decimal:
    """
    Montant de la remise à déduire du sous-total.

    Args:
        subtotal: Sous-total de l'agrégat.
        discount: Valeur de la remise (pourcentage ou montant fixe).
        discount_type: PERCENTAGE, FIXED ou None.

    Returns:
        Decimal: 0 si aucune remise n'est configurée.
    """
    if discount is None or discount_type is None:
        return Decimal(0)
    discount_value = to_decimal(discount)
    if discount_value == 0:
        return Decimal(0)
    if DiscountType(discount_type) == DiscountType.PERCENTAGE:
        return to_decimal(subtotal) * discount_value / Decimal(100)
    return discount_value


def compute_total_value(
    subtotal: Number,
    discount: Optional[Number] = None,
    discount_type: Optional[Union[DiscountType, str]] = None,
) -> Decimal:
    """Valeur totale = max(0, sous-total - remise)."""
    total = to_decimal(subtotal) - compute_discount_amount(subtotal, discount, discount_type)
    if total < 0:
        return ZERO
    return quantize_money(total)


def apply_totals(aggregate, item_totals: Iterable[Number]) -> None:
    """
    Recalcule et affecte `subtotal` et `total_value` sur l'agrégat.

    Les agrégats sans remise (listes de matériel) n'ont pas d'attributs
    `discount` / `discount_type`: la valeur totale y est égale au sous-total.
    """
    subtotal = compute_subtotal(item_totals)
    aggregate.subtotal = subtotal
    aggregate.total_value = compute_total_value(
        subtotal,
        getattr(aggregate, "discount", None),
        getattr(aggregate, "discount_type", None),
    )
