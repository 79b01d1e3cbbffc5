"""
Module définissant les routes API FastAPI pour les utilisateurs.

Contient les endpoints pour:
- /users/ : Enregistrement d'un nouveau professionnel.
- /users/me : Lecture et mise à jour du profil de l'utilisateur connecté.
- /users/check-email : Disponibilité d'un email.
"""
import logging

from fastapi import APIRouter, HTTPException, status

from eletrica.auth.dependencies import CurrentUserDep
from eletrica.users import models
from eletrica.users.dependencies import UserServiceDep
from eletrica.users.exceptions import InvalidCurrentPasswordError, UserAlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=models.UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: models.UserCreate,
    user_service: UserServiceDep
):
    """Enregistre un nouveau professionnel."""
    logger.info("[Router] Tentative d'enregistrement pour: %s", user_in.email)
    try:
        return await user_service.create_user(user_data=user_in)
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except Exception as e:
        logger.error("[Router] Erreur inattendue lors de l'enregistrement de %s: %s", user_in.email, e, exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors de la création de l'utilisateur.")

@router.get("/me", response_model=models.UserRead)
async def read_users_me(current_user: CurrentUserDep):
    """Récupère les informations de l'utilisateur actuellement connecté."""
    logger.info("[Router] Récupération infos pour user ID: %s", current_user.id)
    return current_user

@router.put("/me", response_model=models.UserRead)
async def update_users_me(
    user_in: models.UserUpdate,
    current_user: CurrentUserDep,
    user_service: UserServiceDep
):
    """Met à jour le profil (nom, téléphone, email, mot de passe) de l'utilisateur connecté."""
    logger.info("[Router] MAJ profil pour user ID: %s", current_user.id)
    try:
        return await user_service.update_user(current_user.id, user_in)
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InvalidCurrentPasswordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error("[Router] Erreur inattendue lors de la MAJ du profil %s: %s", current_user.id, e, exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors de la mise à jour du profil.")

@router.post("/check-email", response_model=models.EmailAvailability)
async def check_email_availability(email_in: models.EmailCheck, user_service: UserServiceDep):
    """Indique si un email est encore libre pour un nouvel enregistrement."""
    available = await user_service.is_email_available(email_in.email)
    return models.EmailAvailability(email=email_in.email, available=available)

user_router = router
