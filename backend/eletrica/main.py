"""
Module principal de l'application FastAPI Elétrica.

Ce module configure l'instance FastAPI, ajoute le middleware CORS et inclut les
routeurs de l'API: authentification, utilisateurs, clients, catalogue
(services et matériels), orçamentos, listes de matériel et routes publiques.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eletrica.config import settings
from eletrica.database import create_tables

# --- Importer les routeurs ---
from eletrica.auth.router import auth_router
from eletrica.users.router import user_router
from eletrica.clients.router import client_router
from eletrica.catalog.router import service_router, material_router
from eletrica.budgets.router import budget_router
from eletrica.material_lists.router import material_list_router
from eletrica.public.router import public_router

# Configurer le logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_CREATE_TABLES_ON_STARTUP:
        logger.info("Création des tables au démarrage.")
        await create_tables()
    yield


app = FastAPI(
    title="Elétrica API",
    description="API de gestion des clients, du catalogue, des orçamentos et des listes de matériel d'un électricien.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range"],
)

# ======================================================
# Inclure les routeurs
# ======================================================
prefix = settings.API_V1_PREFIX

app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["Authentification"])
app.include_router(user_router, prefix=f"{prefix}/users", tags=["Utilisateurs"])

app.include_router(client_router, prefix=f"{prefix}/clients", tags=["Clients"])

# Catalogue
app.include_router(service_router, prefix=f"{prefix}/services", tags=["Services"])
app.include_router(material_router, prefix=f"{prefix}/materials", tags=["Materials"])

# Orçamentos et listes de matériel
app.include_router(budget_router, prefix=f"{prefix}/budgets", tags=["Budgets"])
app.include_router(material_list_router, prefix=f"{prefix}/material-lists", tags=["Material Lists"])

# Accès public des clients finaux (sans authentification)
app.include_router(public_router, prefix=f"{prefix}/public", tags=["Public"])


@app.get("/", include_in_schema=False)
async def root():
    return {"message": "Elétrica API", "docs": "/docs"}
