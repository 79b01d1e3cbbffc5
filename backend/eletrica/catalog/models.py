"""
Modèles SQLModel du catalogue du professionnel: services et matériels.

Les items d'orçamento et de liste de matériel copient nom, prix et unité
d'une entrée du catalogue à leur création; une modification ultérieure du
catalogue ne les affecte pas.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from eletrica.utils import utcnow


class CatalogUnit(str, Enum):
    UNIT = "UNIT"
    METER = "METER"


class CatalogEntryBase(SQLModel):
    """Champs communs à un service et à un matériel."""
    name: str = Field(..., min_length=1, max_length=255, index=True)
    description: Optional[str] = Field(default=None)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    unit: CatalogUnit = Field(default=CatalogUnit.UNIT)
    category: Optional[str] = Field(default=None, max_length=100, index=True)
    is_active: bool = Field(default=True)

    model_config = ConfigDict(from_attributes=True)


class Service(CatalogEntryBase, table=True):
    """Service proposé par le professionnel (main d'oeuvre)."""
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class Material(CatalogEntryBase, table=True):
    """Matériel électrique vendu ou fourni par le professionnel."""
    __tablename__ = "materials"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class CatalogEntryCreate(CatalogEntryBase):
    pass


class CatalogEntryUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    unit: Optional[CatalogUnit] = None
    category: Optional[str] = Field(default=None, max_length=100)
    is_active: Optional[bool] = None


class CatalogEntryRead(CatalogEntryBase):
    id: int
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class PaginatedCatalogRead(SQLModel):
    items: List[CatalogEntryRead]
    total: int

