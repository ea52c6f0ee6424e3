"""
Modèles événement et participation (agenda)
"""
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from trombinoscope.database import Base


class EventType(str, enum.Enum):
    """Types d'événement"""
    ANNIVERSAIRE = "anniversaire"
    FORMATION = "formation"
    REUNION = "reunion"
    EVENEMENT = "evenement"
    CONGE = "conge"


class ParticipationStatus(str, enum.Enum):
    """Statuts de participation"""
    INVITE = "invite"
    ACCEPTE = "accepte"
    REFUSE = "refuse"
    EN_ATTENTE = "en_attente"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Event(Base):
    """Table des événements"""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    titre = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type_evenement = Column(SQLEnum(EventType, values_callable=_enum_values), nullable=False, index=True)
    date_debut = Column(DateTime, nullable=False, index=True)
    date_fin = Column(DateTime, nullable=True)
    lieu = Column(String(200), nullable=True)
    organisateur_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    est_public = Column(Boolean, default=True, nullable=False)
    rappel_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    organisateur = relationship("Employee")
    participants = relationship("EventParticipant", back_populates="event", cascade="all, delete-orphan")

    @property
    def organisateur_nom_complet(self):
        return self.organisateur.nom_complet if self.organisateur is not None else None

    @property
    def nombre_participants(self) -> int:
        """Participants ayant accepté"""
        return sum(1 for p in self.participants if p.statut_participation == ParticipationStatus.ACCEPTE)

    def __repr__(self):
        return f"<Event(id={self.id}, titre={self.titre}, type={self.type_evenement})>"


class EventParticipant(Base):
    """Table de liaison événement / employé"""
    __tablename__ = "event_participants"
    __table_args__ = (UniqueConstraint("event_id", "employee_id", name="uq_event_employee"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    statut_participation = Column(
        SQLEnum(ParticipationStatus, values_callable=_enum_values),
        default=ParticipationStatus.INVITE,
        nullable=False,
    )
    date_reponse = Column(DateTime, nullable=True)

    event = relationship("Event", back_populates="participants")
    employee = relationship("Employee")

    def __repr__(self):
        return f"<EventParticipant(event_id={self.event_id}, employee_id={self.employee_id})>"
