"""
Fonctions utilitaires pour le module client.
"""
import secrets
import string

PUBLIC_LINK_ALPHABET = string.ascii_letters + string.digits
PUBLIC_LINK_LENGTH = 12
ACCESS_CODE_LENGTH = 6


def generate_public_link() -> str:
    """Lien public alphanumérique de 12 caractères."""
    return "".join(secrets.choice(PUBLIC_LINK_ALPHABET) for _ in range(PUBLIC_LINK_LENGTH))


def generate_access_code() -> str:
    """Code d'accès numérique à 6 chiffres."""
    return "".join(secrets.choice(string.digits) for _ in range(ACCESS_CODE_LENGTH))
