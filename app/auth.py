import logging
from dataclasses import dataclass, field
from typing import Optional

import firebase_admin
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from sqlalchemy.orm import Session

from .config import FIREBASE_CREDENTIALS_PATH, FIREBASE_PROJECT_ID
from .models import User

logger = logging.getLogger(__name__)

# auto_error=False so the reservation flow can classify a missing identity itself
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CallerIdentity:
    """Verified caller plus the custom claims attached by the identity provider"""

    uid: str
    email: Optional[str] = None
    tenant_id: Optional[str] = None
    roles: tuple[str, ...] = field(default_factory=tuple)

    def has_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)

    @property
    def is_platform_admin(self) -> bool:
        """Admin role without a tenant claim administers every tenant"""
        return self.tenant_id is None and self.has_role("admin")

    def can_access_tenant(self, tenant_id: str) -> bool:
        """Tenant claim matches, or the caller administers every tenant"""
        return self.is_platform_admin or (self.tenant_id is not None and self.tenant_id == tenant_id)

    def is_staff_of(self, tenant_id: str) -> bool:
        """Staff or admin role bound to this tenant by the token's claims"""
        return self.has_role("admin", "staff") and self.can_access_tenant(tenant_id)


def init_firebase() -> None:
    """Initialize Firebase Admin SDK (only once per process)"""
    try:
        firebase_admin.get_app()
        return
    except ValueError:
        pass

    try:
        if FIREBASE_CREDENTIALS_PATH:
            cred = credentials.Certificate(FIREBASE_CREDENTIALS_PATH)
        else:
            cred = credentials.ApplicationDefault()
        firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with credentials")
    except Exception:
        # Initialize without credentials (token verification still works with a project ID)
        firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with project ID only")


def identity_from_claims(decoded_token: dict) -> CallerIdentity:
    """Build a CallerIdentity from a decoded Firebase ID token"""
    # Firebase ID tokens use 'sub' as the user ID claim, not 'uid'
    uid = decoded_token.get("uid") or decoded_token.get("sub") or decoded_token.get("user_id")
    if not uid:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(decoded_token.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    roles = decoded_token.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]

    return CallerIdentity(
        uid=uid,
        email=decoded_token.get("email"),
        tenant_id=decoded_token.get("tenantId") or None,
        roles=tuple(str(r) for r in roles),
    )


def verify_firebase_token(token: str) -> dict:
    """Verify a Firebase ID token and return its decoded claims"""
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    try:
        return firebase_auth.verify_id_token(token)
    except firebase_auth.ExpiredIdTokenError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        logger.warning(f"⚠️ Token verification failed: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e
    except Exception as e:
        logger.error(f"❌ Token verification error details: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CallerIdentity]:
    """Return the verified caller, or None when no bearer token was sent"""
    if not credentials:
        return None

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    identity = identity_from_claims(verify_firebase_token(token))
    logger.debug(f"✅ Caller authenticated: {identity.uid} (tenant={identity.tenant_id})")
    return identity


async def get_current_identity(
    identity: Optional[CallerIdentity] = Depends(get_optional_identity),
) -> CallerIdentity:
    """Get the verified caller, rejecting anonymous requests"""
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )
    return identity


def require_roles(*roles: str):
    """
    Create a dependency that requires the caller to hold one of the given roles.

    Example usage:
        @router.post("/tenants")
        async def create_tenant(identity: CallerIdentity = Depends(require_roles("admin"))):
            ...
    """

    async def role_checker(
        identity: CallerIdentity = Depends(get_current_identity),
    ) -> CallerIdentity:
        if not identity.has_role(*roles):
            logger.warning(f"⚠️ Caller {identity.uid} lacks roles {roles}")
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return identity

    return role_checker


def is_tenant_member(db: Session, uid: str, tenant_id: str) -> bool:
    """Active user profile registered in the tenant"""
    return (
        db.query(User.id)
        .filter(User.id == uid, User.tenant_id == tenant_id, User.is_active.is_(True))
        .first()
        is not None
    )


def ensure_tenant_access(
    identity: CallerIdentity, tenant_id: str, db: Optional[Session] = None
) -> None:
    """
    Reject callers outside the tenant.

    The tenant claim decides when present. Callers without one pass only as
    platform admins or, when a session is given, through their user profile.
    """
    if identity.can_access_tenant(tenant_id):
        return

    member = (
        db is not None
        and identity.tenant_id is None
        and is_tenant_member(db, identity.uid, tenant_id)
    )
    if not member:
        logger.warning(
            f"⚠️ Caller {identity.uid} (tenant={identity.tenant_id}) denied access to tenant {tenant_id}"
        )
        raise HTTPException(status_code=403, detail="User does not have access to this tenant")
