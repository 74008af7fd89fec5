from heromarket.domain.errors import InvalidInput
from heromarket.domain.services.balance_tables import PRINCIPAL_MAX_LENGTH


def validate_principal(caller: str) -> str:
    """Return the caller as the string stored for owners, sellers and buyers."""
    principal = str(caller)
    if len(principal) > PRINCIPAL_MAX_LENGTH:
        raise InvalidInput(f"Principal cannot exceed {PRINCIPAL_MAX_LENGTH} characters")
    return principal
