"""
Service de gestion des employés (trombinoscope)
Couche logique métier
"""
from datetime import date
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from trombinoscope.database import commit_or_conflict
from trombinoscope.models.employee import Employee
from trombinoscope.models.user import User
from trombinoscope.schemas.employee import EmployeeCreate, EmployeeUpdate
from trombinoscope.services.filters import compose_filters
from trombinoscope.utils.dates import months_ago
from trombinoscope.utils.audit import log_event
from trombinoscope.utils.exceptions import DuplicateException, NotFoundException, ValidationException

MIN_SEARCH_LENGTH = 2


class EmployeeService:
    """Service de gestion des employés"""

    @staticmethod
    def _directory_order():
        return (Employee.equipe, Employee.responsable_equipe.desc(), Employee.nom, Employee.prenom)

    @staticmethod
    def _active_by_id(db: Session, employee_id: int) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.id == employee_id, Employee.is_active.is_(True)).first()

    @staticmethod
    def _check_email_available(db: Session, email: Optional[str], exclude_id: int = None):
        if not email:
            return
        query = db.query(Employee.id).filter(Employee.email == email, Employee.is_active.is_(True))
        if exclude_id is not None:
            query = query.filter(Employee.id != exclude_id)
        if query.first():
            raise DuplicateException(
                "Cet email est déjà utilisé par un autre employé", code="EMAIL_ALREADY_USED"
            )

    @staticmethod
    def _check_manager(db: Session, manager_id: Optional[int], employee_id: int = None):
        if manager_id is None:
            return
        if employee_id is not None and manager_id == employee_id:
            raise ValidationException("Un employé ne peut pas être son propre responsable")
        if not EmployeeService._active_by_id(db, manager_id):
            raise ValidationException("Responsable introuvable", code="MANAGER_NOT_FOUND")

    @staticmethod
    def list_employees(db: Session, team: Optional[str] = None, active: bool = True) -> List[Employee]:
        """Liste de l'annuaire, responsables en tête de chaque équipe"""
        query = db.query(Employee).options(joinedload(Employee.manager))
        query = compose_filters(query, [
            (active, lambda v: Employee.is_active.is_(v)),
            (team, lambda v: Employee.equipe == v),
        ])
        return query.order_by(*EmployeeService._directory_order()).all()

    @staticmethod
    def get_employee_by_id(db: Session, employee_id: int) -> Employee:
        """Fiche active par ID"""
        employee = (
            db.query(Employee)
            .options(joinedload(Employee.manager))
            .filter(Employee.id == employee_id, Employee.is_active.is_(True))
            .first()
        )
        if not employee:
            raise NotFoundException("Employé non trouvé", code="EMPLOYEE_NOT_FOUND")
        return employee

    @staticmethod
    def create_employee(db: Session, employee_data: EmployeeCreate, created_by: User) -> Employee:
        """Création d'une fiche employé"""
        EmployeeService._check_email_available(db, employee_data.email)
        EmployeeService._check_manager(db, employee_data.manager_id)

        employee = Employee(**employee_data.model_dump())
        db.add(employee)
        commit_or_conflict(db, "Cet email est déjà utilisé par un autre employé", code="EMAIL_ALREADY_USED")
        db.refresh(employee)

        log_event("EMPLOYEE_CREATED", created_by, {
            "employeeId": employee.id,
            "employeeName": employee.nom_complet,
        })
        return employee

    @staticmethod
    def update_employee(db: Session, employee_id: int, employee_data: EmployeeUpdate, updated_by: User) -> Employee:
        """Modification partielle; seules les colonnes reconnues sont écrites"""
        employee = EmployeeService._active_by_id(db, employee_id)
        if not employee:
            raise NotFoundException("Employé non trouvé", code="EMPLOYEE_NOT_FOUND")

        update_data = employee_data.column_diff()
        if not update_data:
            raise ValidationException("Aucune donnée à mettre à jour", code="NOTHING_TO_UPDATE")

        if "email" in update_data:
            EmployeeService._check_email_available(db, update_data["email"], exclude_id=employee_id)
        if "manager_id" in update_data:
            EmployeeService._check_manager(db, update_data["manager_id"], employee_id=employee_id)

        for field, value in update_data.items():
            setattr(employee, field, value)

        commit_or_conflict(db, "Cet email est déjà utilisé par un autre employé", code="EMAIL_ALREADY_USED")
        db.refresh(employee)

        log_event("EMPLOYEE_UPDATED", updated_by, {
            "employeeId": employee.id,
            "employeeName": employee.nom_complet,
            "updatedFields": sorted(update_data),
        })
        return employee

    @staticmethod
    def deactivate_employee(db: Session, employee_id: int, deactivated_by: User) -> Employee:
        """Désactivation (suppression logique, la ligne est conservée)"""
        employee = EmployeeService._active_by_id(db, employee_id)
        if not employee:
            raise NotFoundException("Employé non trouvé", code="EMPLOYEE_NOT_FOUND")

        employee.is_active = False
        db.commit()
        db.refresh(employee)

        log_event("EMPLOYEE_DEACTIVATED", deactivated_by, {
            "employeeId": employee.id,
            "employeeName": employee.nom_complet,
        })
        return employee

    @staticmethod
    def search_employees(
            db: Session,
            q: Optional[str],
            team: Optional[str] = None,
            poste: Optional[str] = None
    ) -> List[Employee]:
        """
        Recherche insensible à la casse sur nom, prénom, poste et équipe
        Le filtrage se fait en mémoire pour comparer les accents correctement.
        """
        term = (q or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise ValidationException(
                "Le terme de recherche doit contenir au moins 2 caractères", code="SEARCH_TERM_TOO_SHORT"
            )

        needle = term.casefold()
        employees = EmployeeService.list_employees(db, team=team)
        results = [
            emp for emp in employees
            if any(needle in (value or "").casefold() for value in (emp.nom, emp.prenom, emp.poste, emp.equipe))
        ]
        if poste:
            wanted = poste.casefold()
            results = [emp for emp in results if wanted in emp.poste.casefold()]
        return results

    @staticmethod
    def get_team_structure(db: Session) -> List[dict]:
        """Équipes calculées par regroupement des fiches actives"""
        rows = (
            db.query(
                Employee.equipe,
                func.count(Employee.id),
                func.sum(case((Employee.responsable_equipe.is_(True), 1), else_=0)),
            )
            .filter(Employee.is_active.is_(True))
            .group_by(Employee.equipe)
            .order_by(Employee.equipe)
            .all()
        )
        return [
            {"nom": equipe, "nombre_employes": count, "nombre_responsables": int(leads or 0)}
            for equipe, count, leads in rows
        ]

    @staticmethod
    def count_recent_hires(employees: List[Employee], months: int = 3, today: date = None) -> int:
        cutoff = months_ago(today or date.today(), months)
        return sum(1 for emp in employees if emp.date_embauche and emp.date_embauche >= cutoff)

    @staticmethod
    def get_stats(db: Session, months: int = 3) -> dict:
        """Statistiques agrégées de l'annuaire"""
        employees = EmployeeService.list_employees(db)
        teams = EmployeeService.get_team_structure(db)
        return {
            "total_employes": len(employees),
            "nombre_equipes": len(teams),
            "responsables_equipe": sum(1 for emp in employees if emp.responsable_equipe),
            "repartition_par_equipe": [
                {
                    "equipe": team["nom"],
                    "nombre": team["nombre_employes"],
                    "responsables": team["nombre_responsables"],
                }
                for team in teams
            ],
            "derniers_mois_embauches": EmployeeService.count_recent_hires(employees, months),
        }
