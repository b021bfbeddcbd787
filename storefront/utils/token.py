import logging
import time
from typing import Optional

from jose import jwt, JWTError

from storefront.utils.client_storage import ClientStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
TOKEN_KEYS = ("token", "userToken", "vendorToken", "adminToken")


def read_token_claims(token: str) -> Optional[dict]:
    # signature is the backend's business, we only look inside
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def is_token_usable(token: str, now: Optional[float] = None) -> bool:
    claims = read_token_claims(token)
    if claims is None:
        return False

    if not claims.get("userType"):
        return False

    exp = claims.get("exp")
    if exp is not None and float(exp) <= (now or time.time()):
        return False

    return True


def clear_tokens(storage: ClientStorage):
    for key in TOKEN_KEYS:
        storage.remove_item(key)


def check_token_format(storage: ClientStorage) -> bool:
    """
    Drop stored tokens issued before userType was added, undecodable
    tokens and expired ones. Returns False when tokens were cleared.
    """
    for key in TOKEN_KEYS:
        token = storage.get_item(key)
        if not token:
            continue

        if not is_token_usable(token):
            logger.warning(f"Stored '{key}' is stale or malformed, clearing tokens")
            clear_tokens(storage)
            return False

    return True
