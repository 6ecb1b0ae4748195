import secrets
import string

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
ID_LENGTH = 8


def generate_unique_id(length: int = ID_LENGTH) -> str:
    # Uniqueness is not checked here; callers decide whether to check the registry.
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
