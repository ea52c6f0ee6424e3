"""
État d'authentification côté client
"""
from typing import Optional

from trombinoscope.client.api_client import ApiClient, ApiError

# Ordre croissant des privilèges
ROLE_LEVELS = {"user": 1, "manager": 2, "admin": 3}


class AuthState:
    def __init__(self, api: ApiClient):
        self.api = api
        self.user: Optional[dict] = None

    @property
    def token(self) -> Optional[str]:
        return self.api.token

    @property
    def is_authenticated(self) -> bool:
        return self.api.token is not None and self.user is not None

    def login(self, username: str, password: str) -> dict:
        data = self.api.login(username, password)
        self.user = data["user"]
        return self.user

    def logout(self) -> None:
        try:
            if self.api.token:
                self.api.logout()
        finally:
            self.clear()

    def clear(self) -> None:
        self.api.token = None
        self.user = None

    def validate_token(self) -> bool:
        """Vérifie le jeton auprès du serveur; un 401 efface l'état local"""
        if not self.api.token:
            return False
        try:
            self.user = self.api.get_profile()
        except ApiError as e:
            if e.status == 401:
                self.clear()
                return False
            raise
        return True

    def has_role(self, required_role: str) -> bool:
        """Rôles ordonnés: user < manager < admin"""
        if not self.user:
            return False
        return ROLE_LEVELS.get(self.user.get("role"), 0) >= ROLE_LEVELS.get(required_role, 99)

    @property
    def display_name(self) -> str:
        return self.user["username"] if self.user else ""
