"""
Dépendances d'authentification et contrôle des rôles
Injection de dépendances FastAPI
"""
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from typing import Optional
from trombinoscope.database import get_db
from trombinoscope.security.auth import decode_access_token
from trombinoscope.models.user import User, UserRole
from trombinoscope.utils.exceptions import UnauthorizedException, ForbiddenException


async def get_current_user(
        request: Request,
        db: Session = Depends(get_db),
        authorization: Optional[str] = Header(None)
) -> User:
    """
    Utilisateur authentifié courant
    - extrait le jeton Bearer de l'en-tête Authorization
    - recharge l'utilisateur en base à chaque requête (rôle et statut toujours à jour)
    """
    if not authorization:
        raise UnauthorizedException("Token d'accès requis", code="AUTH_TOKEN_MISSING")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise UnauthorizedException("Format d'en-tête Authorization invalide", code="AUTH_TOKEN_INVALID")
    if scheme.lower() != "bearer":
        raise UnauthorizedException("Schéma d'authentification invalide", code="AUTH_TOKEN_INVALID")

    payload = decode_access_token(token)

    user = db.query(User).filter(User.id == payload.user_id).first()
    if not user:
        raise UnauthorizedException("Utilisateur non trouvé", code="AUTH_USER_NOT_FOUND")
    if not user.is_active:
        raise UnauthorizedException("Compte utilisateur désactivé", code="AUTH_USER_INACTIVE")

    request.state.user_label = f"{user.username}({user.role.value})"
    return user


def require_roles(*roles: UserRole):
    """Fabrique de dépendance: le rôle de l'utilisateur doit appartenir à l'ensemble autorisé"""
    allowed = set(roles)

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise ForbiddenException(
                "Permissions insuffisantes pour cette action", code="AUTH_INSUFFICIENT_PERMISSIONS"
            )
        return current_user

    return checker


get_current_admin_user = require_roles(UserRole.ADMIN)
get_current_manager_user = require_roles(UserRole.ADMIN, UserRole.MANAGER)
