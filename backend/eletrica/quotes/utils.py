import uuid


def generate_access_link() -> str:
    """Jeton non devinable donnant un accès public à un seul agrégat."""
    return str(uuid.uuid4())
