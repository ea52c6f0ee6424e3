"""
Routes d'authentification et de gestion des comptes
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List
from trombinoscope.database import get_db
from trombinoscope.dependencies import get_current_user, get_current_admin_user
from trombinoscope.middleware.request_logging import client_ip
from trombinoscope.models.user import User
from trombinoscope.schemas.common import ApiResponse
from trombinoscope.schemas.user import (
    UserCreate, UserLogin, UserResponse, ProfileResponse, ProfileUpdate, PasswordChange, TokenData
)
from trombinoscope.security.auth import create_access_token
from trombinoscope.services.user_service import UserService
from trombinoscope.utils.audit import log_event

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"]
)


@router.post("/login", response_model=ApiResponse[TokenData])
async def login(
        user_login: UserLogin,
        request: Request,
        db: Session = Depends(get_db)
):
    """Connexion et émission du jeton"""
    user = UserService.authenticate_user(db, user_login, ip=client_ip(request))
    token = create_access_token(user.id, user.username, user.role.value)

    return {
        "message": "Connexion réussie",
        "data": {"token": token, "user": user},
    }


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
        user_data: UserCreate,
        current_user: User = Depends(get_current_admin_user),
        db: Session = Depends(get_db)
):
    """Création d'un compte (administrateurs uniquement)"""
    user = UserService.create_user(db, user_data, created_by=current_user)
    return {"message": "Utilisateur créé avec succès", "data": user}


@router.get("/profile", response_model=ApiResponse[ProfileResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    profile = UserResponse.model_validate(current_user).model_dump()
    profile["member_since"] = current_user.created_at
    return {"data": profile}


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
        profile_data: ProfileUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    user = UserService.update_profile(db, current_user, profile_data)
    return {"message": "Profil mis à jour avec succès", "data": user}


@router.put("/change-password", response_model=ApiResponse[None])
async def change_password(
        data: PasswordChange,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    UserService.change_password(db, current_user, data)
    return {"message": "Mot de passe modifié avec succès"}


@router.post("/logout", response_model=ApiResponse[None])
async def logout(current_user: User = Depends(get_current_user)):
    """Déconnexion (jetons sans état: simple trace d'audit)"""
    log_event("USER_LOGOUT", current_user, {"userId": current_user.id})
    return {"message": "Déconnexion réussie"}


@router.get("/users", response_model=ApiResponse[List[UserResponse]])
async def list_users(
        current_user: User = Depends(get_current_admin_user),
        db: Session = Depends(get_db)
):
    users = UserService.get_all_users(db)
    return {"data": users, "count": len(users)}


@router.post("/users/{user_id}/deactivate", response_model=ApiResponse[UserResponse])
async def deactivate_user(
        user_id: int,
        current_user: User = Depends(get_current_admin_user),
        db: Session = Depends(get_db)
):
    user = UserService.deactivate_user(db, user_id, current_user)
    return {"message": "Utilisateur désactivé", "data": user}


@router.post("/users/{user_id}/activate", response_model=ApiResponse[UserResponse])
async def activate_user(
        user_id: int,
        current_user: User = Depends(get_current_admin_user),
        db: Session = Depends(get_db)
):
    user = UserService.activate_user(db, user_id, current_user)
    return {"message": "Utilisateur réactivé", "data": user}
