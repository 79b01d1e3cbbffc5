"""Exceptions spécifiques au catalogue (services et matériels)."""


class CatalogDomainException(Exception):
    """Classe de base pour les exceptions du catalogue."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class CatalogEntryNotFoundException(CatalogDomainException):
    """Levée lorsqu'une entrée du catalogue n'existe pas ou n'appartient pas au professionnel."""
    label = "Entrée du catalogue"

    def __init__(self, entry_id: int):
        super().__init__(f"{self.label} avec ID {entry_id} non trouvé.")
        self.entry_id = entry_id


class ServiceNotFoundException(CatalogEntryNotFoundException):
    label = "Service"


class MaterialNotFoundException(CatalogEntryNotFoundException):
    label = "Matériel"


class DuplicateCatalogEntryException(CatalogDomainException):
    """Levée lorsqu'une entrée du même nom existe déjà pour le professionnel."""
    def __init__(self, name: str):
        super().__init__(f"Une entrée nommée '{name}' existe déjà dans le catalogue.")
        self.name = name


class CatalogEntryInUseException(CatalogDomainException):
    """Levée lorsqu'on tente de supprimer une entrée référencée par des items."""
    def __init__(self, entry_id: int, usage_count: int):
        super().__init__(
            f"Impossible de supprimer l'entrée ID {entry_id}: elle est utilisée par {usage_count} item(s). "
            f"Désactivez-la à la place."
        )
        self.entry_id = entry_id
        self.usage_count = usage_count
