"""
Modèles SQLModel pour les clients du professionnel.
"""
import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, field_validator
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from eletrica.quotes.constants import QuoteStatus
from eletrica.utils import utcnow


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def _check_min_length(value: Optional[str], minimum: int, message: str) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if len(value) < minimum:
        raise ValueError(message)
    return value


class ClientValidationMixin(SQLModel):
    """Règles de validation communes à la création et à la mise à jour."""

    @field_validator("full_name", check_fields=False)
    @classmethod
    def validate_full_name(cls, v):
        return _check_min_length(v, 2, "Le nom complet doit contenir au moins 2 caractères")

    @field_validator("phone", check_fields=False)
    @classmethod
    def validate_phone(cls, v):
        if v is not None and len(_digits(v)) < 10:
            raise ValueError("Le téléphone doit contenir au moins 10 chiffres")
        return v

    @field_validator("cep", check_fields=False)
    @classmethod
    def validate_cep(cls, v):
        if v is not None and len(_digits(v)) != 8:
            raise ValueError("Le CEP doit contenir 8 chiffres")
        return v

    @field_validator("street", check_fields=False)
    @classmethod
    def validate_street(cls, v):
        return _check_min_length(v, 3, "L'adresse doit contenir au moins 3 caractères")

    @field_validator("number", check_fields=False)
    @classmethod
    def validate_number(cls, v):
        return _check_min_length(v, 1, "Le numéro est obligatoire")

    @field_validator("neighborhood", check_fields=False)
    @classmethod
    def validate_neighborhood(cls, v):
        return _check_min_length(v, 2, "Le quartier doit contenir au moins 2 caractères")

    @field_validator("city", check_fields=False)
    @classmethod
    def validate_city(cls, v):
        return _check_min_length(v, 2, "La ville doit contenir au moins 2 caractères")

    @field_validator("state", check_fields=False)
    @classmethod
    def validate_state(cls, v):
        if v is not None:
            v = v.strip().upper()
            if len(v) != 2:
                raise ValueError("L'état doit contenir 2 caractères (UF)")
        return v


# --- Modèles pour Client ---

class ClientBase(SQLModel):
    """Champs communs d'un client."""
    full_name: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=20)
    email: Optional[str] = Field(default=None, max_length=255)
    cpf_cnpj: Optional[str] = Field(default=None, max_length=20)
    requires_invoice: bool = Field(default=False)
    cep: str = Field(..., max_length=9)
    street: str = Field(..., max_length=255)
    number: str = Field(..., max_length=20)
    neighborhood: str = Field(..., max_length=100)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=2)

    model_config = ConfigDict(from_attributes=True)


class Client(ClientBase, table=True):
    """Modèle de table pour un client."""
    __tablename__ = "clients"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    is_active: bool = Field(default=True, nullable=False)
    public_link: str = Field(..., unique=True, index=True, max_length=32)
    access_code: str = Field(..., unique=True, index=True, max_length=6)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class ClientCreate(ClientValidationMixin, ClientBase):
    """Schéma de création d'un client."""
    email: Optional[EmailStr] = None


class ClientUpdate(ClientValidationMixin):
    """Schéma de mise à jour partielle d'un client."""
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    cpf_cnpj: Optional[str] = None
    requires_invoice: Optional[bool] = None
    cep: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    is_active: Optional[bool] = None


class ClientRead(ClientBase):
    """Schéma de lecture d'un client."""
    id: int
    user_id: int
    is_active: bool
    public_link: str
    access_code: str
    public_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PaginatedClientRead(SQLModel):
    items: List[ClientRead]
    total: int


class ClientStats(SQLModel):
    """Statistiques des clients d'un professionnel."""
    total_clients: int = 0
    active_clients: int = 0
    inactive_clients: int = 0
    recent_clients: int = 0


# --- Schémas du portail public ---

class ClientPublicRead(SQLModel):
    """Données du client exposées sur le portail public."""
    id: int
    full_name: str

    model_config = ConfigDict(from_attributes=True)


class PortalBudgetRead(SQLModel):
    id: int
    name: str
    status: QuoteStatus
    total_value: Decimal
    access_link: str
    valid_until: Optional[date] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PortalMaterialListRead(SQLModel):
    id: int
    name: str
    status: QuoteStatus
    total_value: Decimal
    access_link: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClientPortalRead(SQLModel):
    """Réponse du portail public d'un client."""
    client: ClientPublicRead
    budgets: List[PortalBudgetRead] = []
    material_lists: List[PortalMaterialListRead] = []
