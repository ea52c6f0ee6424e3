"""
Vue agenda côté client: filtre par type, navigation mensuelle, grille du calendrier
"""
import calendar
from datetime import date, datetime
from typing import List, Optional

from trombinoscope.client.api_client import ApiClient
from trombinoscope.utils.dates import JOURS_COURTS, month_label

TYPE_LABELS = {
    "reunion": "Réunion",
    "formation": "Formation",
    "evenement": "Événement",
    "conge": "Congé",
    "anniversaire": "Anniversaire",
}

STATUS_LABELS = {
    "accepte": "Confirmé",
    "invite": "Invité",
    "refuse": "Refusé",
    "en_attente": "En attente",
}

MAX_UPCOMING = 10


def type_label(event_type: str) -> str:
    return TYPE_LABELS.get(event_type, event_type)


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def event_start(event: dict) -> datetime:
    return datetime.fromisoformat(event["dateDebut"])


class Agenda:
    def __init__(self, api: ApiClient, today: date = None):
        self.api = api
        self.today = today or date.today()
        self.year = self.today.year
        self.month = self.today.month
        self.events: List[dict] = []
        self.type_filter: Optional[str] = None

    def load(self) -> List[dict]:
        self.events = self.api.get_events()
        return self.events

    def filter_by_type(self, event_type: Optional[str]) -> List[dict]:
        self.type_filter = event_type or None
        return self.filtered_events

    @property
    def filtered_events(self) -> List[dict]:
        return [
            event for event in self.events
            if not self.type_filter or event["typeEvenement"] == self.type_filter
        ]

    @property
    def title(self) -> str:
        return f"{month_label(self.month)} {self.year}"

    def next_month(self) -> None:
        self.year, self.month = (self.year + 1, 1) if self.month == 12 else (self.year, self.month + 1)

    def previous_month(self) -> None:
        self.year, self.month = (self.year - 1, 12) if self.month == 1 else (self.year, self.month - 1)

    def go_to_today(self) -> None:
        self.year, self.month = self.today.year, self.today.month

    def events_for_date(self, day: date) -> List[dict]:
        return [event for event in self.filtered_events if event_start(event).date() == day]

    @staticmethod
    def header() -> List[str]:
        return list(JOURS_COURTS)

    def month_grid(self) -> List[Optional[dict]]:
        """
        Cellules du mois, semaine commençant le lundi.
        Les cellules vides (None) précèdent le premier jour du mois.
        """
        first_weekday, days_in_month = calendar.monthrange(self.year, self.month)
        cells: List[Optional[dict]] = [None] * first_weekday
        for day_number in range(1, days_in_month + 1):
            day = date(self.year, self.month, day_number)
            events = self.events_for_date(day)
            cells.append({
                "day": day_number,
                "date": day,
                "is_today": day == self.today,
                "events_count": len(events),
                "events": events,
            })
        return cells

    def upcoming(self, now: datetime = None) -> List[dict]:
        now = now or datetime.now()
        upcoming = [event for event in self.filtered_events if event_start(event) >= now]
        upcoming.sort(key=event_start)
        return upcoming[:MAX_UPCOMING]
