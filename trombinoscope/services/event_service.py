"""
Service de gestion de l'agenda (événements, participants, anniversaires)
Couche logique métier
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import extract, func
from sqlalchemy.orm import Session, joinedload, selectinload

from trombinoscope.models.employee import Employee
from trombinoscope.models.event import Event, EventParticipant, EventType, ParticipationStatus
from trombinoscope.models.user import User, UserRole
from trombinoscope.schemas.event import (
    EventCreate, EventUpdate, ParticipantCreate, check_date_range
)
from trombinoscope.services.filters import compose_filters
from trombinoscope.utils.audit import log_event
from trombinoscope.utils.dates import birthday_in_year
from trombinoscope.utils.exceptions import (
    ForbiddenException, NotFoundException, NotImplementedException, ValidationException
)

logger = logging.getLogger(__name__)

MIN_GENERATION_YEAR = 2020
MAX_GENERATION_YEAR = 2030
MAX_UPCOMING_DAYS = 365


class EventService:
    """Service de gestion des événements"""

    @staticmethod
    def _base_query(db: Session):
        return db.query(Event).options(
            joinedload(Event.organisateur),
            selectinload(Event.participants),
        )

    @staticmethod
    def _active_employee(db: Session, employee_id: int) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.id == employee_id, Employee.is_active.is_(True)).first()

    @staticmethod
    def list_events(
            db: Session,
            type_evenement: Optional[EventType] = None,
            date_debut: Optional[datetime] = None,
            date_fin: Optional[datetime] = None,
            est_public: Optional[bool] = None
    ) -> List[Event]:
        """Liste filtrée, triée par date de début"""
        query = compose_filters(EventService._base_query(db), [
            (type_evenement, lambda v: Event.type_evenement == v),
            (date_debut, lambda v: Event.date_debut >= v),
            (date_fin, lambda v: Event.date_debut <= v),
            (est_public, lambda v: Event.est_public.is_(v)),
        ])
        return query.order_by(Event.date_debut).all()

    @staticmethod
    def get_event_by_id(db: Session, event_id: int) -> Event:
        event = EventService._base_query(db).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundException("Événement non trouvé", code="EVENT_NOT_FOUND")
        return event

    @staticmethod
    def get_upcoming_events(db: Session, days: int = 30, now: datetime = None) -> List[Event]:
        """Événements publics des N prochains jours"""
        if not 1 <= days <= MAX_UPCOMING_DAYS:
            raise ValidationException("Le nombre de jours doit être entre 1 et 365")
        now = now or datetime.now()
        return (
            EventService._base_query(db)
            .filter(
                Event.est_public.is_(True),
                Event.date_debut >= now,
                Event.date_debut <= now + timedelta(days=days),
            )
            .order_by(Event.date_debut)
            .all()
        )

    @staticmethod
    def get_birthdays(db: Session, month: int = None) -> List[dict]:
        """
        Anniversaires du mois, calculés depuis les fiches employés actives
        (indépendamment des événements enregistrés)
        """
        current_month = date.today().month
        month = month or current_month
        if not 1 <= month <= 12:
            raise ValidationException("Le mois doit être entre 1 et 12")

        employees = (
            db.query(Employee)
            .filter(
                Employee.is_active.is_(True),
                Employee.date_anniversaire.isnot(None),
                extract("month", Employee.date_anniversaire) == month,
            )
            .all()
        )
        employees.sort(key=lambda emp: (emp.date_anniversaire.day, emp.nom, emp.prenom))
        return [
            {
                "id": emp.id,
                "nom": emp.nom,
                "prenom": emp.prenom,
                "nom_complet": emp.nom_complet,
                "poste": emp.poste,
                "equipe": emp.equipe,
                "date_anniversaire": emp.date_anniversaire,
                "jour_anniversaire": emp.date_anniversaire.day,
                "photo_url": emp.photo_url,
                "est_ce_mois": month == current_month,
            }
            for emp in employees
        ]

    @staticmethod
    def create_event(db: Session, event_data: EventCreate, created_by: User) -> Event:
        """Création d'un événement; l'employé fêté est inscrit d'office"""
        organisateur_id = event_data.organisateur_id or created_by.employee_id
        if event_data.organisateur_id is not None and not EventService._active_employee(db, organisateur_id):
            raise ValidationException("Organisateur introuvable", code="ORGANIZER_NOT_FOUND")

        subject_id = None
        if event_data.type_evenement == EventType.ANNIVERSAIRE and event_data.employee_id is not None:
            if not EventService._active_employee(db, event_data.employee_id):
                raise NotFoundException("Employé non trouvé", code="EMPLOYEE_NOT_FOUND")
            subject_id = event_data.employee_id

        event = Event(
            **event_data.model_dump(exclude={"organisateur_id", "employee_id"}),
            organisateur_id=organisateur_id,
        )
        db.add(event)
        db.flush()

        if subject_id is not None:
            db.add(EventParticipant(
                event_id=event.id,
                employee_id=subject_id,
                statut_participation=ParticipationStatus.ACCEPTE,
                date_reponse=datetime.now(),
            ))

        db.commit()
        db.refresh(event)

        log_event("EVENT_CREATED", created_by, {
            "eventId": event.id,
            "titre": event.titre,
            "type": event.type_evenement.value,
        })
        return event

    @staticmethod
    def update_event(db: Session, event_id: int, event_data: EventUpdate, updated_by: User) -> Event:
        """Modification réservée à l'organisateur ou à un administrateur"""
        event = EventService.get_event_by_id(db, event_id)

        is_organizer = event.organisateur_id is not None and event.organisateur_id == updated_by.employee_id
        if not is_organizer and updated_by.role != UserRole.ADMIN:
            raise ForbiddenException(
                "Seul l'organisateur ou un administrateur peut modifier cet événement",
                code="EVENT_UPDATE_FORBIDDEN",
            )

        update_data = event_data.column_diff()
        if not update_data:
            raise ValidationException("Aucune donnée à mettre à jour", code="NOTHING_TO_UPDATE")

        try:
            check_date_range(
                update_data.get("date_debut", event.date_debut),
                update_data.get("date_fin", event.date_fin),
            )
        except ValueError as e:
            raise ValidationException(str(e))

        for field, value in update_data.items():
            setattr(event, field, value)

        db.commit()
        db.refresh(event)

        log_event("EVENT_UPDATED", updated_by, {
            "eventId": event.id,
            "updatedFields": sorted(update_data),
        })
        return event

    @staticmethod
    def delete_event(db: Session, event_id: int, deleted_by: User):
        raise NotImplementedException("Fonctionnalité de suppression non implémentée")

    @staticmethod
    def add_participant(db: Session, event_id: int, data: ParticipantCreate, acting_user: User) -> EventParticipant:
        """Inscription idempotente: une seule ligne par (événement, employé)"""
        EventService.get_event_by_id(db, event_id)
        if not EventService._active_employee(db, data.employee_id):
            raise NotFoundException("Employé non trouvé", code="EMPLOYEE_NOT_FOUND")

        participant = db.query(EventParticipant).filter(
            EventParticipant.event_id == event_id,
            EventParticipant.employee_id == data.employee_id,
        ).first()

        if participant:
            participant.statut_participation = data.statut
            participant.date_reponse = datetime.now()
        else:
            participant = EventParticipant(
                event_id=event_id,
                employee_id=data.employee_id,
                statut_participation=data.statut,
                date_reponse=datetime.now(),
            )
            db.add(participant)

        db.commit()
        db.refresh(participant)

        log_event("EVENT_PARTICIPANT_ADDED", acting_user, {
            "eventId": event_id,
            "employeeId": data.employee_id,
            "statut": data.statut.value,
        })
        return participant

    @staticmethod
    def list_participants(db: Session, event_id: int) -> Tuple[List[dict], dict, dict]:
        """Participants actifs, résumé par statut et regroupement par statut"""
        EventService.get_event_by_id(db, event_id)

        rows = (
            db.query(EventParticipant, Employee)
            .join(Employee, EventParticipant.employee_id == Employee.id)
            .filter(EventParticipant.event_id == event_id, Employee.is_active.is_(True))
            .order_by(EventParticipant.statut_participation, Employee.nom, Employee.prenom)
            .all()
        )

        participants = [
            {
                "id": emp.id,
                "nom": emp.nom,
                "prenom": emp.prenom,
                "nom_complet": emp.nom_complet,
                "poste": emp.poste,
                "equipe": emp.equipe,
                "photo_url": emp.photo_url,
                "statut_participation": part.statut_participation,
                "date_reponse": part.date_reponse,
            }
            for part, emp in rows
        ]

        by_status = {status.value: [] for status in ParticipationStatus}
        for participant in participants:
            by_status[participant["statut_participation"].value].append(participant)

        summary = {"total": len(participants)}
        summary.update({status: len(items) for status, items in by_status.items()})
        return participants, summary, by_status

    @staticmethod
    def generate_birthday_events(db: Session, year: int, generated_by: User) -> List[Event]:
        """
        Un événement anniversaire par employé actif ayant une date de naissance.
        Un événement déjà présent (même date, même organisateur) n'est pas recréé.
        """
        if not MIN_GENERATION_YEAR <= year <= MAX_GENERATION_YEAR:
            raise ValidationException("Année invalide (2020-2030)", code="INVALID_YEAR")

        employees = (
            db.query(Employee)
            .filter(Employee.is_active.is_(True), Employee.date_anniversaire.isnot(None))
            .order_by(Employee.id)
            .all()
        )

        created = []
        for emp in employees:
            day = birthday_in_year(emp.date_anniversaire, year)
            event_date = datetime(day.year, day.month, day.day)

            exists = db.query(Event.id).filter(
                Event.type_evenement == EventType.ANNIVERSAIRE,
                Event.date_debut == event_date,
                Event.organisateur_id == emp.id,
            ).first()
            if exists:
                continue

            event = Event(
                titre=f"Anniversaire de {emp.prenom} {emp.nom}",
                description=f"Joyeux anniversaire à {emp.prenom} !",
                type_evenement=EventType.ANNIVERSAIRE,
                date_debut=event_date,
                organisateur_id=emp.id,
                est_public=True,
                rappel_active=False,
            )
            event.participants.append(EventParticipant(
                employee_id=emp.id,
                statut_participation=ParticipationStatus.ACCEPTE,
                date_reponse=datetime.now(),
            ))
            db.add(event)
            created.append(event)

        db.commit()
        for event in created:
            db.refresh(event)

        logger.info("%d événements d'anniversaire créés pour %d", len(created), year)
        log_event("BIRTHDAY_EVENTS_GENERATED", generated_by, {"year": year, "eventsCreated": len(created)})
        return created

    @staticmethod
    def get_stats(db: Session) -> dict:
        """Statistiques de l'agenda"""
        rows = (
            db.query(Event.type_evenement, func.count(Event.id))
            .group_by(Event.type_evenement)
            .all()
        )
        repartition = {event_type.value: count for event_type, count in rows}
        recent_cutoff = datetime.utcnow() - timedelta(days=7)

        return {
            "total_evenements": sum(repartition.values()),
            "evenements_a_venir": len(EventService.get_upcoming_events(db, 30)),
            "anniversaires_ce_mois": len(EventService.get_birthdays(db)),
            "repartition_par_type": repartition,
            "evenements_recents": db.query(Event).filter(Event.created_at >= recent_cutoff).count(),
        }
