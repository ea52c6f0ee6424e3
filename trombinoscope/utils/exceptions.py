"""
Exceptions applicatives typées
Le code HTTP dépend du type d'erreur, jamais du texte du message
"""
import enum

from fastapi import status


class ErrorKind(str, enum.Enum):
    """Catégories d'erreurs"""
    VALIDATION = "validation"
    AUTH = "auth"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    NOT_IMPLEMENTED = "not_implemented"
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.PERMISSION: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_IMPLEMENTED: status.HTTP_501_NOT_IMPLEMENTED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppException(Exception):
    """Exception applicative de base"""
    kind = ErrorKind.INTERNAL
    default_message = "Erreur interne du serveur"
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str = None, code: str = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationException(AppException):
    """Données d'entrée invalides"""
    kind = ErrorKind.VALIDATION
    default_message = "Données invalides"
    default_code = "VALIDATION_ERROR"


class UnauthorizedException(AppException):
    """Authentification absente ou invalide"""
    kind = ErrorKind.AUTH
    default_message = "Authentification requise"
    default_code = "AUTH_REQUIRED"


class ForbiddenException(AppException):
    """Permissions insuffisantes"""
    kind = ErrorKind.PERMISSION
    default_message = "Permissions insuffisantes pour cette action"
    default_code = "AUTH_INSUFFICIENT_PERMISSIONS"


class NotFoundException(AppException):
    """Ressource introuvable"""
    kind = ErrorKind.NOT_FOUND
    default_message = "Ressource non trouvée"
    default_code = "NOT_FOUND"


class DuplicateException(AppException):
    """Clé unique déjà utilisée"""
    kind = ErrorKind.CONFLICT
    default_message = "Ressource déjà existante"
    default_code = "CONFLICT"


class NotImplementedException(AppException):
    """Fonctionnalité non disponible"""
    kind = ErrorKind.NOT_IMPLEMENTED
    default_message = "Fonctionnalité non implémentée"
    default_code = "NOT_IMPLEMENTED"
