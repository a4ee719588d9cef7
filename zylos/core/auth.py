"""
Authentication and permissions for Zylos
Validates JWT bearer tokens and checks role permissions per tenant
"""
from typing import Dict, FrozenSet, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from zylos.core.config import settings
from zylos.core.tenancy import get_optional_tenant
from zylos.domain.enums import UserRole
from zylos.domain.errors import PermissionDenied


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

ROLE_HIERARCHY: Dict[str, int] = {
    UserRole.SUPER_ADMIN.value: 3,
    UserRole.ADMIN.value: 2,
    UserRole.VENDEDOR.value: 1,
    UserRole.CONTADOR.value: 1,
}

_TENANT_ADMIN = frozenset({
    "products:read", "products:write",
    "inventory:read", "inventory:write",
    "customers:read", "customers:write", "customers:delete",
    "suppliers:read", "suppliers:write", "suppliers:delete",
    "sales:read", "sales:create", "sales:update",
    "ledger:read", "ledger:write",
    "reports:read",
})

PERMISSIONS: Dict[str, FrozenSet[str]] = {
    UserRole.SUPER_ADMIN.value: _TENANT_ADMIN | {"tenants:read", "tenants:write"},
    UserRole.ADMIN.value: _TENANT_ADMIN,
    UserRole.VENDEDOR.value: frozenset({
        "products:read",
        "inventory:read",
        "customers:read", "customers:write",
        "sales:read", "sales:create", "sales:update",
    }),
    UserRole.CONTADOR.value: frozenset({
        "products:read",
        "customers:read",
        "suppliers:read", "suppliers:write",
        "sales:read",
        "ledger:read", "ledger:write",
        "reports:read",
    }),
}


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: str
    name: Optional[str] = None
    role: str = UserRole.VENDEDOR.value
    tenant_id: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    def has_permission(self, permission: str) -> bool:
        return permission in PERMISSIONS.get(self.role, frozenset())


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_auth_secret() -> str:
        """Get the AUTH_SECRET from settings"""
        if not settings.AUTH_SECRET:
            raise ValueError("AUTH_SECRET environment variable is not set")
        return settings.AUTH_SECRET

    @staticmethod
    def get_jwt_algorithm() -> str:
        return "HS256"


def create_access_token(payload: dict) -> str:
    """Sign a payload with AUTH_SECRET (used by tests and internal tooling)"""
    return jwt.encode(payload, AuthConfig.get_auth_secret(), algorithm=AuthConfig.get_jwt_algorithm())


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT.

    Expected payload:
    {
        "sub": "user_id",
        "email": "ana@acme.com",
        "name": "Ana",
        "role": "vendedor",
        "tenant_id": "tenant uuid",
        "exp": 1234567890
    }
    """
    try:
        return jwt.decode(
            token,
            AuthConfig.get_auth_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")

    if not user_id or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id or email",
            headers={"WWW-Authenticate": "Bearer"}
        )

    role = payload.get("role", UserRole.VENDEDOR.value)
    if role not in PERMISSIONS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token payload: unknown role '{role}'",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return TokenUser(
        id=str(user_id),
        email=email,
        name=payload.get("name"),
        role=role,
        tenant_id=payload.get("tenant_id")
    )


def check_tenant_access(user: TokenUser, tenant_id: Optional[str]) -> None:
    """A user only acts inside their own tenant, except super admins"""
    if tenant_id is None or user.is_super_admin:
        return
    if user.tenant_id != tenant_id:
        raise PermissionDenied(
            "You do not have access to this tenant",
            {"tenant_id": tenant_id}
        )


def require_permission(permission: str):
    """
    Dependency factory for permission checks on tenant endpoints.

    Usage:
        @router.post("/")
        async def create_sale(user: TokenUser = Depends(require_permission("sales:create"))):
            ...
    """
    async def permission_checker(
        request: Request,
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        tenant = get_optional_tenant(request)
        check_tenant_access(user, tenant.id if tenant else None)

        if not user.has_permission(permission):
            raise PermissionDenied(
                f"Access denied. Required permission: {permission}, your role: {user.role}",
                {"permission": permission, "role": user.role}
            )

        return user

    return permission_checker


def require_role(required_role: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/{tenant_id}/deactivate")
        async def deactivate(user: TokenUser = Depends(require_role("super_admin"))):
            ...
    """
    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        # Role hierarchy: super_admin > admin > vendedor / contador
        user_level = ROLE_HIERARCHY.get(user.role, 0)
        required_level = ROLE_HIERARCHY.get(required_role, 0)

        if user_level < required_level:
            raise PermissionDenied(
                f"Access denied. Required role: {required_role}, your role: {user.role}",
                {"required_role": required_role, "role": user.role}
            )

        return user

    return role_checker
