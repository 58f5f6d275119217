# backend/pokemon_manager/security.py

import base64
import hashlib
import hmac
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from .config import Settings

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: int) -> str:
    """Returns `pbkdf2_sha256$<iterations>$<salt>$<digest>` for the password."""
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return "$".join([
        HASH_ALGORITHM,
        str(iterations),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ])


def verify_password(password: str, encoded: str) -> bool:
    # binascii.Error from b64decode is a ValueError subclass
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
        if algorithm != HASH_ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            base64.b64decode(salt, validate=True),
            int(iterations),
        )
        expected_digest = base64.b64decode(expected, validate=True)
    except ValueError:
        logger.warning("Stored password hash is malformed.")
        return False
    return hmac.compare_digest(digest, expected_digest)


@dataclass
class TokenVerification:
    valid: bool
    expired: bool
    decoded: Optional[Dict[str, Any]] = None
    msg: Optional[str] = None


def sign_token(payload: Dict[str, Any], settings: Settings) -> str:
    """Signs the payload, adding an `exp` claim `token_expiry_hours` from now."""
    claims = dict(payload)
    claims["exp"] = datetime.now(timezone.utc) + timedelta(hours=settings.token_expiry_hours)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> TokenVerification:
    try:
        decoded = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        logger.info(f"Token verification failed: {e}")
        return TokenVerification(valid=False, expired=True, msg=str(e))
    except jwt.InvalidTokenError as e:
        logger.info(f"Token verification failed: {e}")
        return TokenVerification(valid=False, expired=False, msg=str(e))
    return TokenVerification(valid=True, expired=False, decoded=decoded)
