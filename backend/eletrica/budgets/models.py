from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime

from pydantic import ConfigDict, model_validator
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from eletrica.quotes.constants import DEFAULT_ITEM_UNIT, DiscountType, QuoteStatus
from eletrica.quotes.utils import generate_access_link
from eletrica.utils import utcnow

# --- Modèles pour BudgetItem ---

class BudgetItemBase(SQLModel):
    """Champs communs d'un item d'orçamento."""
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(default=None)
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    unit: str = Field(default=DEFAULT_ITEM_UNIT, max_length=20)
    service_id: Optional[int] = Field(default=None, foreign_key="services.id", index=True)
    material_id: Optional[int] = Field(default=None, foreign_key="materials.id", index=True)

    model_config = ConfigDict(from_attributes=True)

class BudgetItem(BudgetItemBase, table=True):
    """Modèle de table pour un item d'orçamento."""
    __tablename__ = "budget_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(foreign_key="budgets.id", index=True, ondelete="CASCADE")
    total_price: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

class BudgetItemCreate(SQLModel):
    """
    Schéma pour ajouter un item.

    Avec `service_id` ou `material_id`, nom, prix et unité sont copiés depuis le
    catalogue sauf s'ils sont fournis explicitement.
    """
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    unit: Optional[str] = Field(default=None, max_length=20)
    service_id: Optional[int] = None
    material_id: Optional[int] = None

class BudgetItemUpdate(SQLModel):
    """Schéma pour la mise à jour partielle d'un item."""
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=3)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    unit: Optional[str] = Field(default=None, max_length=20)

class BudgetItemRead(BudgetItemBase):
    id: int
    budget_id: int
    total_price: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None

# --- Modèles pour Budget ---

class BudgetBase(SQLModel):
    """Champs descriptifs d'un orçamento."""
    name: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = Field(default=None)
    valid_until: Optional[date] = Field(default=None)

    model_config = ConfigDict(from_attributes=True)

class Budget(BudgetBase, table=True):
    """Modèle de table pour un orçamento (devis)."""
    __tablename__ = "budgets"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    status: QuoteStatus = Field(default=QuoteStatus.PENDING, index=True)
    subtotal: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    total_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    discount: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    discount_type: Optional[DiscountType] = Field(default=None)
    discount_reason: Optional[str] = Field(default=None, max_length=255)
    approved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejected_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    access_link: str = Field(default_factory=generate_access_link, unique=True, index=True, max_length=64)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Relations
    items: List[BudgetItem] = Relationship(
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "lazy": "selectin",
            "order_by": "BudgetItem.id",
        }
    )

class BudgetCreate(BudgetBase):
    """Schéma pour créer un orçamento (toujours au statut PENDING, totaux à zéro)."""
    client_id: int
    discount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    discount_type: Optional[DiscountType] = None
    discount_reason: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def check_discount_type(self):
        if self.discount and self.discount_type is None:
            raise ValueError("discount_type est obligatoire lorsqu'une remise est fournie")
        return self

class BudgetUpdate(SQLModel):
    """Schéma pour modifier les champs descriptifs d'un orçamento PENDING."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    notes: Optional[str] = None
    valid_until: Optional[date] = None

class BudgetRead(BudgetBase):
    """Schéma pour lire un orçamento depuis l'API."""
    id: int
    user_id: int
    client_id: int
    status: QuoteStatus
    subtotal: Decimal
    total_value: Decimal
    discount: Optional[Decimal] = None
    discount_type: Optional[DiscountType] = None
    discount_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    access_link: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[BudgetItemRead] = []

class PaginatedBudgetRead(SQLModel):
    """Schéma pour une réponse paginée d'orçamentos."""
    items: List[BudgetRead]
    total: int

class BudgetFilters(SQLModel):
    """Filtres de listage des orçamentos."""
    client_id: Optional[int] = None
    status: Optional[QuoteStatus] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
