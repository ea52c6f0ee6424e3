"""
Schémas Pydantic des employés (requêtes/réponses API)
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import List, Optional
import re

from trombinoscope.config import settings
from trombinoscope.schemas.common import ApiResponse, CamelModel


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^[0-9\-\+\s\(\)]{10,20}$")

_TRIMMED_FIELDS = ("nom", "prenom", "poste", "equipe")
_NON_NULLABLE_FIELDS = ("nom", "prenom", "poste", "equipe", "responsable_equipe")


def _validate_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if not _EMAIL_RE.match(v):
        raise ValueError("Format d'email invalide")
    return v


def _validate_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if not _PHONE_RE.match(v):
        raise ValueError("Format de téléphone invalide")
    return v


class EmployeeCreate(BaseModel):
    """Création d'un employé"""
    nom: str = Field(..., min_length=2, max_length=100)
    prenom: str = Field(..., min_length=2, max_length=100)
    poste: str = Field(..., min_length=3, max_length=150)
    equipe: str = Field(..., min_length=2, max_length=100)
    responsable_equipe: bool = False
    email: Optional[str] = None
    telephone: Optional[str] = None
    date_embauche: Optional[date] = None
    date_anniversaire: Optional[date] = None
    photo_url: Optional[str] = Field(None, max_length=255)
    manager_id: Optional[int] = None

    @field_validator(*_TRIMMED_FIELDS, mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)

    @field_validator("telephone")
    @classmethod
    def validate_telephone(cls, v: Optional[str]) -> Optional[str]:
        return _validate_phone(v)


class EmployeeUpdate(BaseModel):
    """
    Modification partielle d'un employé
    Seuls les champs déclarés ici peuvent être écrits en base;
    les clés inconnues du corps de requête sont ignorées.
    """
    nom: Optional[str] = Field(None, min_length=2, max_length=100)
    prenom: Optional[str] = Field(None, min_length=2, max_length=100)
    poste: Optional[str] = Field(None, min_length=3, max_length=150)
    equipe: Optional[str] = Field(None, min_length=2, max_length=100)
    responsable_equipe: Optional[bool] = None
    email: Optional[str] = None
    telephone: Optional[str] = None
    date_embauche: Optional[date] = None
    date_anniversaire: Optional[date] = None
    photo_url: Optional[str] = Field(None, max_length=255)
    manager_id: Optional[int] = None

    @field_validator(*_TRIMMED_FIELDS, mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)

    @field_validator("telephone")
    @classmethod
    def validate_telephone(cls, v: Optional[str]) -> Optional[str]:
        return _validate_phone(v)

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in _NON_NULLABLE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"Le champ {field} ne peut pas être vide")
        return self

    def column_diff(self) -> dict:
        """Colonnes explicitement fournies -> nouvelles valeurs"""
        return self.model_dump(exclude_unset=True)


class EmployeeResponse(CamelModel):
    """Fiche employé exposée par l'API"""
    id: int
    nom: str
    prenom: str
    nom_complet: str
    poste: str
    equipe: str
    responsable_equipe: bool
    email: Optional[str] = None
    telephone: Optional[str] = None
    date_embauche: Optional[date] = None
    date_anniversaire: Optional[date] = None
    photo_url: Optional[str] = None
    manager_id: Optional[int] = None
    manager_nom_complet: Optional[str] = None
    is_active: bool

    @field_validator("photo_url")
    @classmethod
    def default_avatar(cls, v: Optional[str]) -> str:
        return v or settings.default_avatar_url


class EmployeeDetailResponse(EmployeeResponse):
    """Fiche détaillée (subordonnés et horodatages)"""
    nombre_subordonnes: int = 0
    created_at: datetime
    updated_at: datetime


class TeamSummary(CamelModel):
    """Équipe calculée par regroupement sur employees.equipe"""
    nom: str
    nombre_employes: int
    nombre_responsables: int


class TeamBreakdown(CamelModel):
    equipe: str
    nombre: int
    responsables: int


class EmployeeStats(CamelModel):
    """Statistiques du tableau de bord"""
    total_employes: int
    nombre_equipes: int
    responsables_equipe: int
    repartition_par_equipe: list[TeamBreakdown]
    derniers_mois_embauches: int


class EmployeeListResponse(ApiResponse[List[EmployeeResponse]]):
    filters: dict = {}


class EmployeeSearchResponse(ApiResponse[List[EmployeeResponse]]):
    search_term: str
    filters: dict = {}


class EmployeeStatsResponse(ApiResponse[EmployeeStats]):
    periode: str
