"""Exceptions spécifiques au domaine Orçamento."""

from eletrica.quotes.exceptions import QuoteNotFoundException


class BudgetNotFoundException(QuoteNotFoundException):
    """Levée lorsqu'un orçamento n'est pas trouvé."""
    def __init__(self, budget_id: int):
        super().__init__(f"Orçamento avec ID {budget_id} non trouvé.")
        self.budget_id = budget_id


class BudgetItemNotFoundException(QuoteNotFoundException):
    """Levée lorsqu'un item n'existe pas dans l'orçamento indiqué."""
    def __init__(self, budget_id: int, item_id: int):
        super().__init__(f"Item ID {item_id} non trouvé dans l'orçamento ID {budget_id}.")
        self.budget_id = budget_id
        self.item_id = item_id
