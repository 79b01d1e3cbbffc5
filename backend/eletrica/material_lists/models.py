from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime

from pydantic import ConfigDict
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from eletrica.quotes.constants import DEFAULT_ITEM_UNIT, QuoteStatus
from eletrica.quotes.utils import generate_access_link
from eletrica.utils import utcnow

# --- Modèles pour MaterialListItem ---

class MaterialListItemBase(SQLModel):
    """Champs communs d'un item de liste de matériel."""
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(default=None)
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    unit: str = Field(default=DEFAULT_ITEM_UNIT, max_length=20)
    material_id: Optional[int] = Field(default=None, foreign_key="materials.id", index=True)

    model_config = ConfigDict(from_attributes=True)

class MaterialListItem(MaterialListItemBase, table=True):
    __tablename__ = "material_list_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    material_list_id: int = Field(foreign_key="material_lists.id", index=True, ondelete="CASCADE")
    total_price: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

class MaterialListItemCreate(SQLModel):
    """Schéma d'ajout d'un item; avec `material_id`, les champs absents viennent du catalogue."""
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    unit: Optional[str] = Field(default=None, max_length=20)
    material_id: Optional[int] = None

class MaterialListItemUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=3)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    unit: Optional[str] = Field(default=None, max_length=20)

class MaterialListItemRead(MaterialListItemBase):
    id: int
    material_list_id: int
    total_price: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None

# --- Modèles pour MaterialList ---

class MaterialListBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = Field(default=None)
    valid_until: Optional[date] = Field(default=None)

    model_config = ConfigDict(from_attributes=True)

class MaterialList(MaterialListBase, table=True):
    """Liste de matériel: sans remise, la valeur totale est égale au sous-total."""
    __tablename__ = "material_lists"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    budget_id: Optional[int] = Field(default=None, foreign_key="budgets.id", index=True, ondelete="SET NULL")
    status: QuoteStatus = Field(default=QuoteStatus.PENDING, index=True)
    subtotal: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    total_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    approved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejected_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    access_link: str = Field(default_factory=generate_access_link, unique=True, index=True, max_length=64)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    items: List[MaterialListItem] = Relationship(
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "lazy": "selectin",
            "order_by": "MaterialListItem.id",
        }
    )

class MaterialListCreate(MaterialListBase):
    client_id: int
    budget_id: Optional[int] = None

class MaterialListUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    notes: Optional[str] = None
    valid_until: Optional[date] = None

class MaterialListRead(MaterialListBase):
    id: int
    user_id: int
    client_id: int
    budget_id: Optional[int] = None
    status: QuoteStatus
    subtotal: Decimal
    total_value: Decimal
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    access_link: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[MaterialListItemRead] = []

class PaginatedMaterialListRead(SQLModel):
    items: List[MaterialListRead]
    total: int

class MaterialListFilters(SQLModel):
    client_id: Optional[int] = None
    budget_id: Optional[int] = None
    status: Optional[QuoteStatus] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

class DeriveMaterialListRequest(SQLModel):
    """Nom optionnel de la liste dérivée d'un orçamento."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
