"""
Schémas Pydantic de l'agenda (événements et participants)
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import Optional

from trombinoscope.config import settings
from trombinoscope.models.event import EventType, ParticipationStatus
from trombinoscope.schemas.common import ApiResponse, CamelModel


_NON_NULLABLE_FIELDS = ("titre", "type_evenement", "date_debut", "est_public", "rappel_active")


def naive_local(v: Optional[datetime]) -> Optional[datetime]:
    # les dates sont stockées sans fuseau, en heure locale
    if v is not None and v.tzinfo is not None:
        return v.astimezone().replace(tzinfo=None)
    return v


def check_date_range(date_debut: Optional[datetime], date_fin: Optional[datetime]) -> None:
    if date_debut is not None and date_fin is not None and date_fin < date_debut:
        raise ValueError("La date de fin ne peut être antérieure à la date de début")


class EventCreate(BaseModel):
    """Création d'un événement"""
    titre: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    type_evenement: EventType
    date_debut: datetime
    date_fin: Optional[datetime] = None
    lieu: Optional[str] = Field(None, max_length=200)
    est_public: bool = True
    rappel_active: bool = False
    organisateur_id: Optional[int] = None
    # employé fêté (type anniversaire)
    employee_id: Optional[int] = None

    @field_validator("titre", mode="before")
    @classmethod
    def strip_titre(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date_debut", "date_fin")
    @classmethod
    def drop_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_local(v)

    @model_validator(mode="after")
    def validate_dates(self):
        check_date_range(self.date_debut, self.date_fin)
        return self


class EventUpdate(BaseModel):
    """Modification partielle d'un événement (liste blanche des colonnes)"""
    titre: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    type_evenement: Optional[EventType] = None
    date_debut: Optional[datetime] = None
    date_fin: Optional[datetime] = None
    lieu: Optional[str] = Field(None, max_length=200)
    est_public: Optional[bool] = None
    rappel_active: Optional[bool] = None

    @field_validator("titre", mode="before")
    @classmethod
    def strip_titre(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date_debut", "date_fin")
    @classmethod
    def drop_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_local(v)

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in _NON_NULLABLE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"Le champ {field} ne peut pas être vide")
        check_date_range(self.date_debut, self.date_fin)
        return self

    def column_diff(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ParticipantCreate(BaseModel):
    """Ajout (ou mise à jour) d'une participation"""
    employee_id: int = Field(..., alias="employeeId", gt=0)
    statut: ParticipationStatus = ParticipationStatus.INVITE

    class Config:
        populate_by_name = True


class BirthdayGenerationRequest(BaseModel):
    year: int = Field(default_factory=lambda: date.today().year, ge=2020, le=2030)


class EventResponse(CamelModel):
    """Événement exposé par l'API"""
    id: int
    titre: str
    description: Optional[str] = None
    type_evenement: EventType
    date_debut: datetime
    date_fin: Optional[datetime] = None
    lieu: Optional[str] = None
    est_public: bool
    rappel_active: bool
    organisateur_id: Optional[int] = None
    organisateur_nom_complet: Optional[str] = None
    nombre_participants: int = 0
    created_at: datetime
    updated_at: datetime


class ParticipantResponse(CamelModel):
    id: int
    nom: str
    prenom: str
    nom_complet: str
    poste: str
    equipe: str
    photo_url: Optional[str] = None
    statut_participation: ParticipationStatus
    date_reponse: Optional[datetime] = None

    @field_validator("photo_url")
    @classmethod
    def default_avatar(cls, v: Optional[str]) -> str:
        return v or settings.default_avatar_url


class ParticipantSummary(CamelModel):
    total: int
    accepte: int
    invite: int
    refuse: int
    en_attente: int


class ParticipantListResponse(ApiResponse[list[ParticipantResponse]]):
    summary: ParticipantSummary
    participants_by_status: dict[str, list[ParticipantResponse]]


class BirthdayResponse(CamelModel):
    """Anniversaire du mois (calculé depuis les fiches employés)"""
    id: int
    nom: str
    prenom: str
    nom_complet: str
    poste: str
    equipe: str
    date_anniversaire: date
    jour_anniversaire: int
    photo_url: Optional[str] = None
    est_ce_mois: bool = True

    @field_validator("photo_url")
    @classmethod
    def default_avatar(cls, v: Optional[str]) -> str:
        return v or settings.default_avatar_url


class EventStats(CamelModel):
    total_evenements: int
    evenements_a_venir: int
    anniversaires_ce_mois: int
    repartition_par_type: dict[str, int]
    evenements_recents: int


class EventListResponse(ApiResponse[list[EventResponse]]):
    filters: dict = {}


class UpcomingEventsResponse(ApiResponse[list[EventResponse]]):
    periode: str


class BirthdayListResponse(ApiResponse[list[BirthdayResponse]]):
    mois: str
