"""
Authentication and authorization
Bearer tokens are issued by the external identity provider; this module only
verifies them and maps their role claims.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from hotelapp.config import settings

logger = logging.getLogger(__name__)

ROLE_ADMIN = "ROLE_ADMIN"
ROLE_EMPLOYEE = "ROLE_EMPLOYEE"
ROLE_CLIENT = "ROLE_CLIENT"

security = HTTPBearer()


@dataclass
class CurrentUser:
    """Authenticated caller as described by the token claims"""
    subject: str
    username: Optional[str] = None
    email: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    roles: Set[str] = field(default_factory=set)

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    @property
    def is_staff(self) -> bool:
        return bool(self.roles & {ROLE_ADMIN, ROLE_EMPLOYEE})

    @property
    def display_name(self) -> str:
        name = f"{self.given_name or ''} {self.family_name or ''}".strip()
        return name or self.username or self.subject

    def has_any_role(self, *roles: str) -> bool:
        return bool(self.roles & set(roles))


def decode_token(token: str) -> dict:
    """Verify signature, expiry, issuer and (when configured) audience"""
    options = {"verify_aud": settings.OIDC_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.OIDC_SECRET_KEY,
            algorithms=[settings.OIDC_ALGORITHM],
            audience=settings.OIDC_AUDIENCE,
            issuer=settings.OIDC_ISSUER,
            options=options,
        )
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )


def extract_roles(payload: dict) -> Set[str]:
    """Collect roles from the realm_access claim and a flat roles claim"""
    roles: Set[str] = set()
    realm_access = payload.get("realm_access") or {}
    roles.update(realm_access.get("roles") or [])
    roles.update(payload.get("roles") or [])
    return {r for r in roles if isinstance(r, str)}


def user_from_claims(payload: dict) -> CurrentUser:
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject"
        )
    return CurrentUser(
        subject=subject,
        username=payload.get("preferred_username"),
        email=payload.get("email"),
        given_name=payload.get("given_name"),
        family_name=payload.get("family_name"),
        roles=extract_roles(payload),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """Current authenticated user"""
    return user_from_claims(decode_token(credentials.credentials))


def require_roles(allowed_roles: List[str]):
    """Dependency factory: caller must hold at least one of allowed_roles"""
    async def role_checker(current_user: CurrentUser = Depends(get_current_user)):
        if not current_user.has_any_role(*allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return current_user
    return role_checker


require_admin = require_roles([ROLE_ADMIN])
require_staff = require_roles([ROLE_ADMIN, ROLE_EMPLOYEE])
require_any_role = require_roles([ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT])
