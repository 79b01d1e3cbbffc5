"""
Traduction des exceptions métier des devis en réponses HTTP.
"""
from fastapi import HTTPException, status

from eletrica.catalog.exceptions import CatalogDomainException, CatalogEntryNotFoundException
from eletrica.clients.exceptions import ClientDomainException, ClientNotFoundException
from eletrica.quotes.exceptions import (
    AccessLinkMismatchException,
    QuoteDomainException,
    QuoteNotFoundException,
)

# Exceptions attendues par les routes des orçamentos et listes de matériel
QUOTE_DOMAIN_ERRORS = (QuoteDomainException, CatalogDomainException, ClientDomainException)


def to_http_exception(error: Exception) -> HTTPException:
    """Convertit une exception métier en HTTPException (404, 401 ou 400)."""
    if isinstance(error, (QuoteNotFoundException, CatalogEntryNotFoundException, ClientNotFoundException)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, AccessLinkMismatchException):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=getattr(error, "message", str(error)))
