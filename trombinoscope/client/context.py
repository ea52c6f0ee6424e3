"""
Contexte applicatif côté client
Les vues reçoivent explicitement leurs dépendances au lieu d'objets globaux.
"""
from dataclasses import dataclass

from trombinoscope.client.agenda import Agenda
from trombinoscope.client.api_client import ApiClient
from trombinoscope.client.auth_state import AuthState
from trombinoscope.client.directory import EmployeeDirectory


@dataclass
class AppContext:
    api: ApiClient
    auth: AuthState
    directory: EmployeeDirectory
    agenda: Agenda


def build_context(base_url: str, session=None) -> AppContext:
    api = ApiClient(base_url, session=session)
    return AppContext(
        api=api,
        auth=AuthState(api),
        directory=EmployeeDirectory(api),
        agenda=Agenda(api),
    )
