# eletrica/users/models.py
"""
Module définissant les modèles SQLModel pour l'entité User (le professionnel).

Ce module contient :
- UserBase : Classe SQLModel de base avec les champs communs.
- User : Modèle de table SQLModel (table=True) héritant de UserBase.
- UserCreate, UserRead, UserUpdate : Schémas Pydantic/SQLModel pour l'API.
- EmailCheck, EmailAvailability : Vérification de disponibilité d'un email.
"""
from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict, EmailStr

from eletrica.utils import utcnow

# =====================================================
# Schémas: Utilisateurs
# =====================================================

class UserBase(SQLModel):
    """Modèle SQLModel de base pour un utilisateur (données communes)."""
    email: str = Field(unique=True, index=True, max_length=255, nullable=False)
    name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)

    model_config = ConfigDict(from_attributes=True)

# ----- Modèle de Table -----
class User(UserBase, table=True):
    """Modèle de table SQLModel pour les professionnels."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    password_hash: str = Field(nullable=False, max_length=255)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

# ----- Schémas API -----
class UserCreate(UserBase):
    """Schéma pour l'enregistrement d'un professionnel."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128) # Mot de passe en clair lors de la création

class UserRead(UserBase):
    """Schéma pour lire les données d'un utilisateur."""
    id: int
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

class UserUpdate(SQLModel):
    """
    Schéma pour la mise à jour partielle du profil.

    Le changement de mot de passe exige le mot de passe actuel.
    """
    name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=6, max_length=128)

class EmailCheck(SQLModel):
    email: EmailStr

class EmailAvailability(SQLModel):
    """Réponse de la vérification de disponibilité d'un email."""
    email: str
    available: bool
