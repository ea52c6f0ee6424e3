"""
Utilitaires de dates (calendrier français)
"""
import calendar
from datetime import date

MOIS = [
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
]

MOIS_COURTS = [
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
]

JOURS_COURTS = ["Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim"]


def month_label(month: int) -> str:
    return MOIS[month - 1]


def months_ago(reference: date, months: int) -> date:
    """Même jour N mois plus tôt (borné au dernier jour du mois)"""
    month_index = reference.year * 12 + reference.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(reference.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def birthday_in_year(birth_date: date, year: int) -> date:
    """Date de l'anniversaire pour l'année donnée (29/02 -> 28/02 hors année bissextile)"""
    day = min(birth_date.day, calendar.monthrange(year, birth_date.month)[1])
    return date(year, birth_date.month, day)
