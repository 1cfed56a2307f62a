"""
Authentication and authorization.

Three pieces live here:

- the role policy (``authorize`` / ``require_role``), a pure check of the
  current user's role against a required level;
- the session codec (``issue_token`` / ``verify_token``), HS256 JWTs carrying
  ``{"username", "id"}`` and no expiry claim;
- the credential store (``UserStore``), which persists accounts with bcrypt
  digests and turns a successful login into a session token.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import config
from database import to_obj_id
from errors import DuplicateUsername, InvalidCredentials, InvalidRole, InvalidToken, Unauthorized, ValidationFailed
from schemas import Role, User as UserSchema

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)

MIN = "min"
EXACT = "exact"


@dataclass(frozen=True)
class Identity:
    """Claim carried inside a session token."""
    username: str
    id: str


def sanitize_user(doc: Dict) -> Optional[Dict]:
    if not doc:
        return None
    return {"id": str(doc["_id"]), "username": doc["username"], "role": doc["role"]}


# Role policy

def authorize(current_user: Optional[Dict], required: Role, mode: str = MIN) -> bool:
    if current_user is None:
        return False
    try:
        role = Role(current_user.get("role"))
    except ValueError:
        return False
    if mode == EXACT:
        return role == required
    if mode == MIN:
        return role >= required
    raise ValueError(f"unknown authorization mode: {mode}")


def require_role(current_user: Optional[Dict], required: Role, mode: str = MIN) -> Dict:
    if not authorize(current_user, required, mode):
        raise Unauthorized()
    return current_user


# Session codec

def issue_token(identity: Identity, secret: str = config.SECRET_KEY) -> str:
    claims = {"username": identity.username, "id": identity.id}
    return jwt.encode(claims, secret, algorithm=config.ALGORITHM)


def verify_token(token: str, secret: str = config.SECRET_KEY) -> Identity:
    try:
        payload = jwt.decode(token, secret, algorithms=[config.ALGORITHM])
    except JWTError:
        raise InvalidToken()
    username = payload.get("username")
    user_id = payload.get("id")
    if not isinstance(username, str) or not isinstance(user_id, str):
        raise InvalidToken()
    return Identity(username=username, id=user_id)


def current_user_from_header(authorization: Optional[str], users: "UserStore") -> Optional[Dict]:
    """Resolve an ``Authorization`` header to the current user.

    A missing header or one that is not a bearer credential means an anonymous
    request. A bearer token that does not verify raises ``InvalidToken``. A
    valid token whose account no longer exists is also anonymous.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    identity = verify_token(authorization[7:].strip())
    return users.find_by_id(identity.id)


# Credential store

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


class UserStore:
    def __init__(self, db: Database):
        self.collection = db["user"]

    def find_by_id(self, user_id: str) -> Optional[Dict]:
        _id = to_obj_id(user_id)
        if _id is None:
            return None
        return sanitize_user(self.collection.find_one({"_id": _id}))

    def owner_exists(self) -> bool:
        return self.collection.find_one({"role": int(Role.OWNER)}) is not None

    def create_user(self, username: str, password: str, role: int) -> Dict:
        try:
            role = Role(role)
        except ValueError:
            raise InvalidRole(f"Unknown role: {role}")
        if len(username or "") < 3:
            raise ValidationFailed("Username must be at least 3 characters long")
        try:
            user_doc: Dict[str, Any] = UserSchema(
                username=username,
                password_hash=hash_password(password),
                role=role,
            ).model_dump()
        except ValidationError:
            raise ValidationFailed("Invalid user")
        try:
            res = self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            raise DuplicateUsername()
        user_doc["_id"] = res.inserted_id
        logger.info("user %s created with role %s", username, role.name.lower())
        return sanitize_user(user_doc)

    def login(self, username: str, password: str) -> str:
        user = self.collection.find_one({"username": username})
        if user is None:
            pwd_context.dummy_verify()
            raise InvalidCredentials()
        if not verify_password(password, user.get("password_hash", "")):
            raise InvalidCredentials()
        logger.info("%s logged in", user["username"])
        return issue_token(Identity(username=user["username"], id=str(user["_id"])))
