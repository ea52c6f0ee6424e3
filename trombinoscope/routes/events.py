"""
Routes de l'agenda (événements, participants, anniversaires)
"""
from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from trombinoscope.database import get_db
from trombinoscope.dependencies import get_current_user, get_current_admin_user, get_current_manager_user
from trombinoscope.models.event import EventType
from trombinoscope.models.user import User
from trombinoscope.schemas.common import ApiResponse
from trombinoscope.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventStats, EventListResponse, UpcomingEventsResponse,
    BirthdayListResponse, BirthdayGenerationRequest, ParticipantCreate, ParticipantListResponse, naive_local
)
from trombinoscope.services.event_service import EventService
from trombinoscope.utils.dates import month_label
from trombinoscope.utils.audit import log_event

router = APIRouter(
    prefix="/api/events",
    tags=["Events"]
)


@router.get("", response_model=EventListResponse)
async def list_events(
        type_evenement: Optional[EventType] = Query(None, alias="type"),
        date_debut: Optional[datetime] = Query(None, alias="dateDebut"),
        date_fin: Optional[datetime] = Query(None, alias="dateFin"),
        est_public: Optional[bool] = Query(None, alias="public"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    date_debut, date_fin = naive_local(date_debut), naive_local(date_fin)
    events = EventService.list_events(db, type_evenement, date_debut, date_fin, est_public)
    filters = {
        "type": type_evenement.value if type_evenement else None,
        "dateDebut": date_debut.isoformat() if date_debut else None,
        "dateFin": date_fin.isoformat() if date_fin else None,
        "public": est_public,
    }
    log_event("EVENTS_RETRIEVED", current_user, {"count": len(events), "filters": filters})
    return {"data": events, "count": len(events), "filters": filters}


@router.get("/upcoming", response_model=UpcomingEventsResponse)
async def get_upcoming_events(
        days: int = Query(30, ge=1, le=365),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Événements publics des N prochains jours"""
    events = EventService.get_upcoming_events(db, days)
    log_event("UPCOMING_EVENTS_RETRIEVED", current_user, {"days": days, "count": len(events)})
    return {"data": events, "count": len(events), "periode": f"{days} prochains jours"}


@router.get("/birthdays", response_model=BirthdayListResponse)
async def get_birthdays(
        month: Optional[int] = Query(None, ge=1, le=12),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Anniversaires du mois (mois courant par défaut)"""
    month = month or datetime.now().month
    birthdays = EventService.get_birthdays(db, month)
    log_event("BIRTHDAYS_RETRIEVED", current_user, {"month": month, "count": len(birthdays)})
    return {"data": birthdays, "count": len(birthdays), "mois": month_label(month)}


@router.get("/stats", response_model=ApiResponse[EventStats])
async def get_stats(
        current_user: User = Depends(get_current_manager_user),
        db: Session = Depends(get_db)
):
    stats = EventService.get_stats(db)
    log_event("EVENT_STATS_RETRIEVED", current_user)
    return {"data": stats}


@router.post("/generate-birthdays", response_model=ApiResponse[list[EventResponse]],
             status_code=status.HTTP_201_CREATED)
async def generate_birthday_events(
        request_data: Optional[BirthdayGenerationRequest] = None,
        current_user: User = Depends(get_current_admin_user),
        db: Session = Depends(get_db)
):
    """Génération des événements d'anniversaire pour une année (idempotente)"""
    year = (request_data or BirthdayGenerationRequest()).year
    events = EventService.generate_birthday_events(db, year, current_user)
    return {
        "message": f"{len(events)} événements d'anniversaire créés pour {year}",
        "data": events,
        "count": len(events),
    }


@router.post("", response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event(
        event_data: EventCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    event = EventService.create_event(db, event_data, current_user)
    return {"message": "Événement créé avec succès", "data": event}


@router.put("/{event_id}", response_model=ApiResponse[EventResponse])
async def update_event(
        event_id: int,
        event_data: EventUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    event = EventService.update_event(db, event_id, event_data, current_user)
    return {"message": "Événement mis à jour avec succès", "data": event}


@router.delete("/{event_id}", response_model=ApiResponse[None])
async def delete_event(
        event_id: int,
        current_user: User = Depends(get_current_manager_user),
        db: Session = Depends(get_db)
):
    EventService.delete_event(db, event_id, current_user)


@router.get("/{event_id}/participants", response_model=ParticipantListResponse)
async def list_participants(
        event_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    participants, summary, by_status = EventService.list_participants(db, event_id)
    return {
        "data": participants,
        "count": len(participants),
        "summary": summary,
        "participants_by_status": by_status,
    }


@router.post("/{event_id}/participants", response_model=ApiResponse[None], status_code=status.HTTP_201_CREATED)
async def add_participant(
        event_id: int,
        data: ParticipantCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Ajout d'un participant; un ajout répété met à jour le statut"""
    EventService.add_participant(db, event_id, data, current_user)
    return {"message": "Participant ajouté avec succès"}
