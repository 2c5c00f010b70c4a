"""
Authentication: argon2 password hashing and HS256 bearer tokens.

Tokens embed only the user's email and carry no expiry.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerifyMismatchError
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import Settings
from errors import Forbidden, InvalidCredentialsError, NotFoundError, Unauthorized, ValidationError
from schemas import User
from stores import UserStore

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    email: str


class AuthService:
    def __init__(self, users: UserStore, settings: Settings, hasher: Optional[PasswordHasher] = None):
        self.users = users
        self._secret = settings.token_secret
        self._hasher = hasher or PasswordHasher()

    def signup(self, email: str, password: str) -> None:
        if self.users.exists(email):
            raise ValidationError(f"User {email} already exists")
        self.users.add(User(email=email, password=self._hasher.hash(password)))
        logger.info("Registered user %s", email)

    def login(self, email: str, password: str) -> str:
        user = self.users.find(email)
        if user is None:
            raise NotFoundError("Cannot find user", status_code=400)
        try:
            self._hasher.verify(user.password, password)
        except (VerifyMismatchError, InvalidHash):
            logger.info("Rejected login for %s", email)
            raise InvalidCredentialsError("Not Allowed")
        logger.info("User %s logged in", email)
        return self.issue_token(user.email)

    def issue_token(self, email: str) -> str:
        return jwt.encode({"email": email}, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: Optional[str]) -> Identity:
        if not token:
            raise Unauthorized("Missing bearer token")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[TOKEN_ALGORITHM])
        except jwt.PyJWTError as e:
            logger.debug("Token rejected: %s", e)
            raise Forbidden("Invalid token")
        email = payload.get("email")
        if not isinstance(email, str):
            raise Forbidden("Invalid token")
        return Identity(email=email)


bearer_scheme = HTTPBearer(auto_error=False)


def bearer_token(request: Request) -> Optional[str]:
    """Token from ``Authorization: Bearer <token>``; any other scheme counts as none."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Identity:
    token = credentials.credentials if credentials else None
    return auth.verify(token)
