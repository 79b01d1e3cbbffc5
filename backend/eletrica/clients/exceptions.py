"""Exceptions spécifiques au domaine Client."""
from typing import Optional


class ClientDomainException(Exception):
    """Classe de base pour les exceptions du domaine Client."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ClientNotFoundException(ClientDomainException):
    """Levée lorsqu'un client n'existe pas ou n'appartient pas au professionnel."""
    def __init__(self, client_id: Optional[int] = None):
        if client_id is not None:
            super().__init__(f"Client avec ID {client_id} non trouvé.")
        else:
            super().__init__("Client non trouvé ou lien invalide.")
        self.client_id = client_id


class DuplicateClientException(ClientDomainException):
    """Levée lorsqu'un client avec le même CPF/CNPJ ou email existe déjà."""
    def __init__(self, field: str, value: str):
        super().__init__(f"Un client avec ce {field} existe déjà: {value}")
        self.field = field
        self.value = value


class ClientHasDependentsException(ClientDomainException):
    """Levée lorsqu'on tente de supprimer un client lié à des orçamentos ou listes."""
    def __init__(self, client_id: int, budgets: int, material_lists: int):
        super().__init__(
            f"Impossible de supprimer le client ID {client_id}: {budgets} orçamento(s) et "
            f"{material_lists} liste(s) de matériel liés. Désactivez le client à la place."
        )
        self.client_id = client_id
        self.budgets = budgets
        self.material_lists = material_lists
