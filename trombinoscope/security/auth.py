"""
Authentification et sécurité
Génération/vérification des jetons JWT, hachage des mots de passe
"""
from datetime import datetime, timedelta
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from trombinoscope.config import settings
from trombinoscope.schemas.user import TokenPayload
from trombinoscope.utils.exceptions import UnauthorizedException

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Hachage du mot de passe"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Vérification du mot de passe"""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Création d'un jeton d'accès signé (24 h par défaut)"""
    now = datetime.utcnow()
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(user_id),
        "userId": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": expire,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """Vérification du jeton; lève UnauthorizedException si expiré ou invalide"""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
        return TokenPayload(**payload)
    except ExpiredSignatureError:
        raise UnauthorizedException("Token expiré, veuillez vous reconnecter", code="AUTH_TOKEN_EXPIRED")
    except (JWTError, ValidationError):
        raise UnauthorizedException("Token invalide", code="AUTH_TOKEN_INVALID")
