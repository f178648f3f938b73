"""
Bearer-token authentication for the asset-ledger API.

Tokens are issued by the surrounding console (login is out of scope here);
this module only signs tokens for tooling/tests and verifies incoming ones.
"""

from typing import Optional, Any, Dict
from dataclasses import dataclass
from datetime import datetime, timedelta
import jwt
from jwt.exceptions import PyJWTError, ExpiredSignatureError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import config
from app.core.exceptions import UnauthorizedError


security = HTTPBearer(auto_error=False)


@dataclass
class TokenData:
    """Token payload data structure with type safety"""
    user_id: int
    username: str


class AuthService:
    """JWT helpers."""

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a signed access token.

        Args:
            data: Claims; must contain ``sub`` (username) and ``user_id``
            expires_delta: Optional custom lifetime, defaults to config value

        Returns:
            Encoded JWT token as string
        """
        to_encode = data.copy()
        expire = datetime.utcnow() + (
            expires_delta or timedelta(minutes=config.access_token_expire_minutes)
        )
        to_encode.update({"exp": expire, "iat": datetime.utcnow(), "type": "access"})
        return jwt.encode(to_encode, config.jwt_secret, algorithm=config.jwt_algorithm)

    @staticmethod
    def verify_token(token: str) -> Optional[TokenData]:
        """
        Verify and decode an access token.

        Returns:
            TokenData if valid, None if the token is malformed or incomplete

        Raises:
            UnauthorizedError: If the token has expired
        """
        try:
            payload: Dict[str, Any] = jwt.decode(
                token, config.jwt_secret, algorithms=[config.jwt_algorithm]
            )
        except ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except PyJWTError:
            return None

        user_id = payload.get("user_id")
        username = payload.get("sub")
        if user_id is None or username is None or payload.get("type") != "access":
            return None
        return TokenData(user_id=user_id, username=username)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenData:
    """
    Dependency resolving the caller from the ``Authorization: Bearer`` header.

    Raises:
        UnauthorizedError: If the header is missing or the token is invalid
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")

    token_data = AuthService.verify_token(credentials.credentials)
    if token_data is None:
        raise UnauthorizedError("Invalid authentication credentials")

    return token_data
