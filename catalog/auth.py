"""Authentication and security utilities."""

import secrets
from functools import lru_cache

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from catalog.config import UPLOAD_PASS, UPLOAD_REALM, UPLOAD_USER
from catalog.exceptions import InvalidCredentialsError

basic_auth = HTTPBasic(realm=UPLOAD_REALM, auto_error=False)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hash_bytes)


@lru_cache(maxsize=1)
def _upload_password_hash() -> str:
    # the plain password only lives in config; comparisons go through the hash
    return hash_password(UPLOAD_PASS)


def check_upload_credentials(username: str, password: str) -> bool:
    user_ok = secrets.compare_digest(username.encode('utf-8'), UPLOAD_USER.encode('utf-8'))
    password_ok = verify_password(password, _upload_password_hash())
    return user_ok and password_ok


async def require_uploader(credentials: HTTPBasicCredentials = Depends(basic_auth)) -> str:
    """
    FastAPI dependency guarding the upload endpoint with HTTP Basic auth.

    Returns:
        The authenticated username

    Raises:
        InvalidCredentialsError: If credentials are missing or wrong
    """
    if credentials is None:
        raise InvalidCredentialsError("Authentication required.")

    if not check_upload_credentials(credentials.username, credentials.password):
        raise InvalidCredentialsError("Invalid credentials.")

    return credentials.username
