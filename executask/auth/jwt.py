"""JWT token generation and validation for ExecuTask.

Tokens are verified against the identity provider's JWKS endpoint when `AUTH_JWKS_URL` is set
(RS256), otherwise against the shared secret in `JWT_SECRET_KEY`.
"""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict, List, Tuple
from dotenv import load_dotenv

load_dotenv()

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

# Identity provider configuration (optional)
AUTH_JWKS_URL = os.getenv("AUTH_JWKS_URL", "")
AUTH_ISSUER = os.getenv("AUTH_ISSUER", "")
AUTH_AUDIENCE = os.getenv("AUTH_AUDIENCE", "")

_jwks_client: Optional[jwt.PyJWKClient] = None


def _verification_key(token: str) -> Tuple[object, List[str]]:
    global _jwks_client
    if AUTH_JWKS_URL:
        if _jwks_client is None:
            _jwks_client = jwt.PyJWKClient(AUTH_JWKS_URL)
        return _jwks_client.get_signing_key_from_jwt(token).key, ["RS256"]
    return JWT_SECRET_KEY, [JWT_ALGORITHM]


def create_access_token(user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> str:
    """Create a JWT access token for a user (shared-secret mode).

    Args:
        user_id: User ID to encode in token
        email: Optional email claim
        name: Optional display-name claim

    Returns:
        Encoded JWT token string
    """
    payload = {
        "sub": user_id,  # Subject (user ID)
        "exp": datetime.utcnow() + timedelta(hours=JWT_EXPIRATION_HOURS),
        "iat": datetime.utcnow(),  # Issued at
    }
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if AUTH_ISSUER:
        payload["iss"] = AUTH_ISSUER
    if AUTH_AUDIENCE:
        payload["aud"] = AUTH_AUDIENCE
    token = jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
    return token


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload (dict with 'sub' key for user_id), or None if invalid
    """
    try:
        key, algorithms = _verification_key(token)
        payload = jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=AUTH_AUDIENCE or None,
            issuer=AUTH_ISSUER or None,
            options={"verify_aud": bool(AUTH_AUDIENCE)},
        )
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.PyJWTError:
        return None
