"""Exceptions spécifiques au domaine Liste de matériel."""

from eletrica.quotes.exceptions import QuoteNotFoundException


class MaterialListNotFoundException(QuoteNotFoundException):
    """Levée lorsqu'une liste de matériel n'est pas trouvée."""
    def __init__(self, material_list_id: int):
        super().__init__(f"Liste de matériel avec ID {material_list_id} non trouvée.")
        self.material_list_id = material_list_id


class MaterialListItemNotFoundException(QuoteNotFoundException):
    def __init__(self, material_list_id: int, item_id: int):
        super().__init__(f"Item ID {item_id} non trouvé dans la liste de matériel ID {material_list_id}.")
        self.material_list_id = material_list_id
        self.item_id = item_id
