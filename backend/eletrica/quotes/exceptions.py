"""Exceptions communes aux agrégats de devis (orçamentos et listes de matériel)."""

from typing import Optional


class QuoteDomainException(Exception):
    """Classe de base pour les exceptions du moteur de devis."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class QuoteNotFoundException(QuoteDomainException):
    """Levée lorsqu'un agrégat ou un item n'existe pas ou n'appartient pas au professionnel."""
    pass


class QuoteStateConflictException(QuoteDomainException):
    """Levée lorsqu'une modification est tentée sur un agrégat qui n'est pas PENDING."""
    def __init__(self, entity_label: str, entity_id: Optional[int], current_status: str):
        super().__init__(
            f"Seuls les {entity_label}s au statut PENDING peuvent être modifiés "
            f"({entity_label} ID {entity_id} est {current_status})."
        )
        self.entity_id = entity_id
        self.current_status = current_status


class QuoteValidationException(QuoteDomainException):
    """Levée lorsque les données fournies pour un item ou un agrégat sont incomplètes."""
    pass


class AccessLinkMismatchException(QuoteDomainException):
    """Levée lorsque le lien d'accès public ne correspond pas à l'agrégat demandé."""
    def __init__(self, entity_label: str, entity_id: int):
        super().__init__(f"Lien d'accès invalide pour {entity_label} ID {entity_id}.")
        self.entity_id = entity_id
