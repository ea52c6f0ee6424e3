"""
Routes de l'annuaire des employés
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from trombinoscope.database import get_db
from trombinoscope.dependencies import get_current_user, get_current_admin_user, get_current_manager_user
from trombinoscope.models.user import User
from trombinoscope.schemas.common import ApiResponse
from trombinoscope.schemas.employee import (
    EmployeeCreate, EmployeeUpdate, EmployeeResponse, EmployeeDetailResponse,
    EmployeeListResponse, EmployeeSearchResponse, EmployeeStatsResponse, TeamSummary
)
from trombinoscope.services.employee_service import EmployeeService
from trombinoscope.utils.audit import log_event

router = APIRouter(
    prefix="/api/employees",
    tags=["Employees"]
)


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
        team: Optional[str] = None,
        active: bool = True,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Annuaire (fiches actives par défaut, ou désactivées avec active=false)"""
    employees = EmployeeService.list_employees(db, team=team, active=active)
    log_event("EMPLOYEES_RETRIEVED", current_user, {"count": len(employees), "team": team, "active": active})
    return {
        "data": employees,
        "count": len(employees),
        "filters": {"team": team, "active": active},
    }


@router.get("/teams", response_model=ApiResponse[List[TeamSummary]])
async def get_teams(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    teams = EmployeeService.get_team_structure(db)
    log_event("TEAM_STRUCTURE_RETRIEVED", current_user, {"teamsCount": len(teams)})
    return {"data": teams, "count": len(teams)}


@router.get("/search", response_model=EmployeeSearchResponse)
async def search_employees(
        q: Optional[str] = None,
        team: Optional[str] = None,
        poste: Optional[str] = None,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Recherche (au moins 2 caractères)"""
    results = EmployeeService.search_employees(db, q, team=team, poste=poste)
    term = q.strip()
    log_event("EMPLOYEES_SEARCHED", current_user, {"searchTerm": term, "resultsCount": len(results)})
    return {
        "data": results,
        "count": len(results),
        "search_term": term,
        "filters": {"team": team, "poste": poste},
    }


@router.get("/stats", response_model=EmployeeStatsResponse)
async def get_stats(
        months: int = Query(3, ge=1, le=120),
        current_user: User = Depends(get_current_manager_user),
        db: Session = Depends(get_db)
):
    stats = EmployeeService.get_stats(db, months=months)
    log_event("EMPLOYEE_STATS_RETRIEVED", current_user, {"months": months})
    return {"data": stats, "periode": f"{months} derniers mois"}


@router.get("/{employee_id}", response_model=ApiResponse[EmployeeDetailResponse])
async def get_employee(
        employee_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    employee = EmployeeService.get_employee_by_id(db, employee_id)
    log_event("EMPLOYEE_RETRIEVED", current_user, {"employeeId": employee_id})
    return {"data": employee}


@router.post("", response_model=ApiResponse[EmployeeResponse], status_code=status.HTTP_201_CREATED)
async def create_employee(
        employee_data: EmployeeCreate,
        current_user: User = Depends(get_current_manager_user),
        db: Session = Depends(get_db)
):
    employee = EmployeeService.create_employee(db, employee_data, current_user)
    return {"message": "Employé créé avec succès", "data": employee}


@router.put("/{employee_id}", response_model=ApiResponse[EmployeeResponse])
async def update_employee(
        employee_id: int,
        employee_data: EmployeeUpdate,
        current_user: User = Depends(get_current_manager_user),
        db: Session = Depends(get_db)
):
    employee = EmployeeService.update_employee(db, employee_id, employee_data, current_user)
    return {"message": "Employé mis à jour avec succès", "data": employee}


@router.delete("/{employee_id}", response_model=ApiResponse[None])
async def deactivate_employee(
        employee_id: int,
        current_user: User = Depends(get_current_admin_user),
        db: Session = Depends(get_db)
):
    """Suppression logique (la fiche est désactivée, pas effacée)"""
    EmployeeService.deactivate_employee(db, employee_id, current_user)
    return {"message": "Employé désactivé avec succès"}
