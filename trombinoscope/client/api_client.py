"""
Client HTTP de l'API trombinoscope
Injection du jeton Bearer, lecture de l'enveloppe JSON {success, data, ...}
"""
import logging
from typing import Optional

import requests

from trombinoscope.schemas.employee import EmployeeCreate, EmployeeUpdate
from trombinoscope.schemas.event import EventCreate, EventUpdate, ParticipantCreate

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Réponse en erreur de l'API"""

    def __init__(self, status: int, message: str, code: Optional[str] = None):
        self.status = status
        self.message = message
        self.code = code
        super().__init__(f"{status} {message}")


def _clean(params: dict) -> dict:
    return {key: value for key, value in params.items() if value is not None}


class ApiClient:
    """
    Accès aux routes REST
    `session` peut être une requests.Session ou tout objet exposant la même
    méthode request() (par exemple le TestClient de FastAPI).
    """

    def __init__(self, base_url: str, session=None, token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token = token

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, params: dict = None, json: dict = None) -> dict:
        url = f"{self.base_url}{path}"
        response = self.session.request(
            method, url, params=_clean(params or {}), json=json, headers=self._headers()
        )

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or body.get("success") is False:
            message = body.get("error") or body.get("message") or f"Erreur HTTP {response.status_code}"
            logger.warning("Erreur API %s %s: %s", method, path, message)
            raise ApiError(response.status_code, message, body.get("code"))
        return body

    # Authentification

    def login(self, username: str, password: str) -> dict:
        body = self.request("POST", "/api/auth/login", json={"username": username, "password": password})
        self.token = body["data"]["token"]
        return body["data"]

    def logout(self) -> dict:
        try:
            return self.request("POST", "/api/auth/logout")
        finally:
            self.token = None

    def register(self, username: str, email: str, password: str, role: str = "user",
                 employee_id: Optional[int] = None) -> dict:
        payload = _clean({
            "username": username, "email": email, "password": password,
            "role": role, "employee_id": employee_id,
        })
        return self.request("POST", "/api/auth/register", json=payload)["data"]

    def get_profile(self) -> dict:
        return self.request("GET", "/api/auth/profile")["data"]

    def update_profile(self, email: str) -> dict:
        return self.request("PUT", "/api/auth/profile", json={"email": email})["data"]

    def change_password(self, current_password: str, new_password: str) -> dict:
        return self.request("PUT", "/api/auth/change-password", json={
            "currentPassword": current_password,
            "newPassword": new_password,
        })

    def list_users(self) -> list:
        return self.request("GET", "/api/auth/users")["data"]

    # Employés

    def get_employees(self, team: Optional[str] = None, active: Optional[bool] = None) -> list:
        active_param = None if active is None else str(active).lower()
        return self.request("GET", "/api/employees", params={"team": team, "active": active_param})["data"]

    def get_employee(self, employee_id: int) -> dict:
        return self.request("GET", f"/api/employees/{employee_id}")["data"]

    def search_employees(self, q: str, team: Optional[str] = None, poste: Optional[str] = None) -> list:
        return self.request("GET", "/api/employees/search", params={"q": q, "team": team, "poste": poste})["data"]

    def get_teams(self) -> list:
        return self.request("GET", "/api/employees/teams")["data"]

    def get_employee_stats(self, months: int = 3) -> dict:
        return self.request("GET", "/api/employees/stats", params={"months": months})["data"]

    def create_employee(self, data: dict) -> dict:
        # mêmes règles de validation que le serveur, avant envoi
        payload = EmployeeCreate(**data).model_dump(mode="json", exclude_none=True)
        return self.request("POST", "/api/employees", json=payload)["data"]

    def update_employee(self, employee_id: int, data: dict) -> dict:
        payload = EmployeeUpdate(**data).model_dump(mode="json", exclude_unset=True)
        return self.request("PUT", f"/api/employees/{employee_id}", json=payload)["data"]

    def delete_employee(self, employee_id: int) -> dict:
        return self.request("DELETE", f"/api/employees/{employee_id}")

    # Événements

    def get_events(self, type_evenement: Optional[str] = None, date_debut: Optional[str] = None,
                   date_fin: Optional[str] = None, public: Optional[bool] = None) -> list:
        params = {
            "type": type_evenement,
            "dateDebut": date_debut,
            "dateFin": date_fin,
            "public": None if public is None else str(public).lower(),
        }
        return self.request("GET", "/api/events", params=params)["data"]

    def get_upcoming_events(self, days: int = 30) -> list:
        return self.request("GET", "/api/events/upcoming", params={"days": days})["data"]

    def get_birthdays(self, month: Optional[int] = None) -> list:
        return self.request("GET", "/api/events/birthdays", params={"month": month})["data"]

    def get_event_stats(self) -> dict:
        return self.request("GET", "/api/events/stats")["data"]

    def create_event(self, data: dict) -> dict:
        payload = EventCreate(**data).model_dump(mode="json", exclude_none=True)
        return self.request("POST", "/api/events", json=payload)["data"]

    def update_event(self, event_id: int, data: dict) -> dict:
        payload = EventUpdate(**data).model_dump(mode="json", exclude_unset=True)
        return self.request("PUT", f"/api/events/{event_id}", json=payload)["data"]

    def delete_event(self, event_id: int) -> dict:
        return self.request("DELETE", f"/api/events/{event_id}")

    def get_event_participants(self, event_id: int) -> dict:
        return self.request("GET", f"/api/events/{event_id}/participants")

    def add_event_participant(self, event_id: int, employee_id: int, statut: str = "invite") -> dict:
        payload = ParticipantCreate(employeeId=employee_id, statut=statut).model_dump(mode="json", by_alias=True)
        return self.request("POST", f"/api/events/{event_id}/participants", json=payload)

    def generate_birthday_events(self, year: Optional[int] = None) -> list:
        payload = {"year": year} if year is not None else None
        return self.request("POST", "/api/events/generate-birthdays", json=payload)["data"]

    # Divers

    def health(self) -> dict:
        return self.request("GET", "/api/health")

    def get_dashboard_data(self) -> dict:
        """Données du tableau de bord (réservé aux responsables et administrateurs)"""
        return {
            "employees": self.get_employee_stats(),
            "events": self.get_event_stats(),
            "upcoming": self.get_upcoming_events(7),
            "birthdays": self.get_birthdays(),
        }
