"""
Vue de l'annuaire côté client: filtres, regroupement par équipe, export CSV
"""
import csv
import io
from datetime import date
from typing import Dict, List, Optional

from trombinoscope.client.api_client import ApiClient

UNASSIGNED_TEAM = "Non assigné"
CSV_HEADERS = ["Nom", "Prénom", "Poste", "Équipe", "Email", "Téléphone", "Responsable"]


class EmployeeDirectory:
    def __init__(self, api: ApiClient):
        self.api = api
        self.employees: List[dict] = []
        self.teams: List[dict] = []
        self.search_query = ""
        self.team_filter: Optional[str] = None

    def load(self) -> List[dict]:
        self.employees = self.api.get_employees()
        self.teams = self.api.get_teams()
        return self.employees

    def search(self, query: str) -> List[dict]:
        self.search_query = (query or "").strip().casefold()
        return self.filtered_employees

    def filter_by_team(self, team: Optional[str]) -> List[dict]:
        self.team_filter = team or None
        return self.filtered_employees

    def _matches(self, employee: dict) -> bool:
        if self.team_filter and employee.get("equipe") != self.team_filter:
            return False
        if not self.search_query:
            return True
        return any(
            self.search_query in (employee.get(field) or "").casefold()
            for field in ("nom", "prenom", "poste", "equipe")
        )

    @property
    def filtered_employees(self) -> List[dict]:
        """Recherche et filtre d'équipe combinés"""
        return [emp for emp in self.employees if self._matches(emp)]

    @staticmethod
    def group_by_team(employees: List[dict]) -> Dict[str, List[dict]]:
        groups: Dict[str, List[dict]] = {}
        for employee in employees:
            groups.setdefault(employee.get("equipe") or UNASSIGNED_TEAM, []).append(employee)
        return groups

    @staticmethod
    def split_leads(employees: List[dict]):
        """(responsables, membres) d'une équipe"""
        leads = [emp for emp in employees if emp.get("responsableEquipe")]
        members = [emp for emp in employees if not emp.get("responsableEquipe")]
        return leads, members

    def statistics(self) -> dict:
        by_team: Dict[str, int] = {}
        for employee in self.employees:
            team = employee.get("equipe") or UNASSIGNED_TEAM
            by_team[team] = by_team.get(team, 0) + 1
        return {
            "total": len(self.employees),
            "by_team": by_team,
            "managers": sum(1 for emp in self.employees if emp.get("responsableEquipe")),
        }

    def export_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for emp in self.filtered_employees:
            writer.writerow([
                emp.get("nom"),
                emp.get("prenom"),
                emp.get("poste"),
                emp.get("equipe"),
                emp.get("email") or "",
                emp.get("telephone") or "",
                "Oui" if emp.get("responsableEquipe") else "Non",
            ])
        return buffer.getvalue()

    @staticmethod
    def export_filename(today: date = None) -> str:
        return f"trombinoscope_{(today or date.today()).isoformat()}.csv"
