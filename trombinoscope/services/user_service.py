"""
Service de gestion des comptes utilisateurs
Couche logique métier
"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List
from trombinoscope.config import settings
from trombinoscope.database import commit_or_conflict
from trombinoscope.models.employee import Employee
from trombinoscope.models.user import User, UserRole
from trombinoscope.schemas.user import UserCreate, UserLogin, ProfileUpdate, PasswordChange
from trombinoscope.security.auth import hash_password, verify_password
from trombinoscope.utils.audit import log_event
from trombinoscope.utils.exceptions import (
    NotFoundException, DuplicateException, UnauthorizedException, ValidationException
)

logger = logging.getLogger(__name__)


class UserService:
    """Service de gestion des utilisateurs"""

    @staticmethod
    def _find_by_identifier(db: Session, username: str, email: str):
        return db.query(User).filter(
            (func.lower(User.username) == username.lower()) | (func.lower(User.email) == email.lower())
        ).first()

    @staticmethod
    def _check_employee_link(db: Session, employee_id):
        if employee_id is None:
            return
        employee = db.query(Employee).filter(Employee.id == employee_id, Employee.is_active.is_(True)).first()
        if not employee:
            raise ValidationException("Fiche employé rattachée introuvable")

    @staticmethod
    def create_user(db: Session, user_data: UserCreate, created_by: User = None) -> User:
        """Création d'un compte (réservée aux administrateurs)"""
        if UserService._find_by_identifier(db, user_data.username, user_data.email):
            raise DuplicateException(
                "Ce nom d'utilisateur ou email est déjà utilisé", code="USER_ALREADY_EXISTS"
            )
        UserService._check_employee_link(db, user_data.employee_id)

        user = User(
            username=user_data.username,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            role=user_data.role,
            employee_id=user_data.employee_id,
        )
        db.add(user)
        commit_or_conflict(db, "Ce nom d'utilisateur ou email est déjà utilisé", code="USER_ALREADY_EXISTS")
        db.refresh(user)

        log_event("USER_CREATED", created_by, {
            "newUserId": user.id,
            "newUsername": user.username,
            "newUserRole": user.role.value,
        })
        return user

    @staticmethod
    def authenticate_user(db: Session, user_login: UserLogin, ip: str = None) -> User:
        """Connexion par nom d'utilisateur ou email (insensible à la casse)"""
        user = UserService._find_by_identifier(db, user_login.username, user_login.username)

        if not user:
            log_event("LOGIN_FAILED", None, {"username": user_login.username, "reason": "User not found", "ip": ip})
            raise UnauthorizedException("Identifiants incorrects", code="INVALID_CREDENTIALS")

        if not user.is_active:
            log_event("LOGIN_FAILED", None, {"username": user.username, "reason": "Account inactive", "ip": ip})
            raise UnauthorizedException(
                "Compte désactivé, contactez votre administrateur", code="ACCOUNT_INACTIVE"
            )

        if not verify_password(user_login.password, user.password_hash):
            log_event("LOGIN_FAILED", None, {"username": user.username, "reason": "Invalid password", "ip": ip})
            raise UnauthorizedException("Identifiants incorrects", code="INVALID_CREDENTIALS")

        log_event("LOGIN_SUCCESS", user, {"userId": user.id, "role": user.role.value, "ip": ip})
        return user

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> User:
        """Utilisateur par ID"""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundException(f"Utilisateur {user_id} non trouvé", code="USER_NOT_FOUND")
        return user

    @staticmethod
    def get_all_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.username).all()

    @staticmethod
    def update_profile(db: Session, user: User, profile_data: ProfileUpdate) -> User:
        """Modification du profil courant"""
        update_data = profile_data.column_diff()
        if not update_data:
            raise ValidationException("Aucune donnée à mettre à jour", code="NOTHING_TO_UPDATE")

        email = update_data.get("email")
        if email is not None:
            existing = db.query(User).filter(
                func.lower(User.email) == email.lower(), User.id != user.id
            ).first()
            if existing:
                raise DuplicateException("Cet email est déjà utilisé", code="EMAIL_ALREADY_USED")

        for field, value in update_data.items():
            setattr(user, field, value)

        commit_or_conflict(db, "Cet email est déjà utilisé", code="EMAIL_ALREADY_USED")
        db.refresh(user)
        log_event("USER_UPDATED", user, {"userId": user.id, "updatedFields": sorted(update_data)})
        return user

    @staticmethod
    def change_password(db: Session, user: User, data: PasswordChange) -> None:
        """Changement de mot de passe après vérification de l'actuel"""
        if not verify_password(data.current_password, user.password_hash):
            log_event("PASSWORD_CHANGE_FAILED", user, {"reason": "Invalid current password"})
            raise UnauthorizedException("Mot de passe actuel incorrect", code="INVALID_CURRENT_PASSWORD")

        user.password_hash = hash_password(data.new_password)
        db.commit()
        log_event("PASSWORD_CHANGED", user, {"userId": user.id})

    @staticmethod
    def deactivate_user(db: Session, user_id: int, acting_user: User) -> User:
        """Désactivation d'un compte (suppression logique)"""
        if user_id == acting_user.id:
            raise ValidationException("Un administrateur ne peut pas désactiver son propre compte")
        user = UserService.get_user_by_id(db, user_id)
        user.is_active = False
        db.commit()
        db.refresh(user)
        log_event("USER_DEACTIVATED", acting_user, {"userId": user.id, "username": user.username})
        return user

    @staticmethod
    def activate_user(db: Session, user_id: int, acting_user: User) -> User:
        """Réactivation d'un compte"""
        user = UserService.get_user_by_id(db, user_id)
        user.is_active = True
        db.commit()
        db.refresh(user)
        log_event("USER_ACTIVATED", acting_user, {"userId": user.id, "username": user.username})
        return user

    @staticmethod
    def ensure_admin(db: Session) -> bool:
        """Création du compte administrateur si aucun utilisateur n'existe"""
        if db.query(User).count() > 0:
            logger.info("Comptes déjà présents, aucun administrateur créé")
            return False

        db.add(User(
            username=settings.admin_username,
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
            role=UserRole.ADMIN,
        ))
        db.commit()
        logger.info("Utilisateur admin créé - Login: %s", settings.admin_username)
        return True
