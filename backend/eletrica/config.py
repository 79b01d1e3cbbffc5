import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

DEFAULT_JWT_SECRET_KEY = "remplacer_par_une_vraie_cle_secrete_forte"


class Settings(BaseSettings):
    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # --- Base de Données ---
    POSTGRES_DB: str = "eletrica"
    POSTGRES_USER: str = "eletrica"
    POSTGRES_PASSWORD: str = "eletrica"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    # URL complète optionnelle, prioritaire sur les variables POSTGRES_*
    DATABASE_URL: Optional[str] = None
    DB_ECHO_LOG: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    # Création des tables au démarrage (développement, sans script SQL)
    DB_CREATE_TABLES_ON_STARTUP: bool = False

    # --- Application URLs ---
    API_V1_PREFIX: str = "/api/v1"
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8081",
        "http://localhost:19006",
        "http://127.0.0.1:3000",
    ]

    # --- JWT ---
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Messages Génériques ---
    DB_SQL_ERROR_MSG: str = "Un problème technique est survenu avec la base de données."

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'

    @property
    def database_url(self) -> str:
        """URL SQLAlchemy asynchrone construite à partir des variables POSTGRES_*."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()

if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
    logger.warning("La variable JWT_SECRET_KEY utilise la valeur par défaut. Veuillez définir une clé secrète forte.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, API={settings.API_V1_PREFIX}")
