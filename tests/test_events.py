from datetime import date, datetime, timedelta

import pytest
from conftest import auth_headers

from trombinoscope.models.event import Event, EventParticipant, EventType
from trombinoscope.models.user import UserRole


def _iso(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat()


@pytest.fixture
def organizer(make_user, staff):
    """Compte utilisateur rattaché à la fiche de Léa"""
    return make_user("lea", role=UserRole.USER, employee_id=staff["lea"].id)


@pytest.fixture
def organizer_headers(organizer):
    return auth_headers(organizer)


@pytest.fixture
def meeting(client, organizer_headers):
    payload = {
        "titre": "Réunion d'équipe",
        "type_evenement": "reunion",
        "date_debut": _iso(datetime.now() + timedelta(days=3)),
        "date_fin": _iso(datetime.now() + timedelta(days=3, hours=1)),
        "lieu": "Salle 2",
    }
    response = client.post("/api/events", json=payload, headers=organizer_headers)
    assert response.status_code == 201
    return response.json()["data"]


def test_create_event_defaults_organizer_to_linked_employee(meeting, staff):
    assert meeting["organisateurId"] == staff["lea"].id
    assert meeting["organisateurNomComplet"] == "Léa Martin"
    assert meeting["typeEvenement"] == "reunion"
    assert meeting["estPublic"] is True
    assert meeting["rappelActive"] is False
    assert meeting["nombreParticipants"] == 0


def test_create_event_with_end_before_start(client, user_headers, db):
    payload = {
        "titre": "Formation Python",
        "type_evenement": "formation",
        "date_debut": "2030-05-10T10:00:00",
        "date_fin": "2030-05-10T09:00:00",
    }
    response = client.post("/api/events", json=payload, headers=user_headers)
    assert response.status_code == 400
    assert db.query(Event).count() == 0


def test_create_event_with_unknown_type(client, user_headers):
    payload = {"titre": "Pique-nique", "type_evenement": "fete", "date_debut": "2030-05-10T10:00:00"}
    assert client.post("/api/events", json=payload, headers=user_headers).status_code == 400


def test_birthday_event_enrolls_subject(client, admin_headers, staff, db):
    payload = {
        "titre": "Anniversaire de Léa",
        "type_evenement": "anniversaire",
        "date_debut": "2030-03-14T12:00:00",
        "employee_id": staff["lea"].id,
    }
    response = client.post("/api/events", json=payload, headers=admin_headers)
    assert response.status_code == 201
    event = response.json()["data"]
    assert event["nombreParticipants"] == 1

    participant = db.query(EventParticipant).filter(EventParticipant.event_id == event["id"]).one()
    assert participant.employee_id == staff["lea"].id
    assert participant.statut_participation.value == "accepte"


def test_birthday_event_for_unknown_employee(client, admin_headers, db):
    payload = {
        "titre": "Anniversaire mystère",
        "type_evenement": "anniversaire",
        "date_debut": "2030-03-14T12:00:00",
        "employee_id": 999,
    }
    response = client.post("/api/events", json=payload, headers=admin_headers)
    assert response.status_code == 404
    assert db.query(Event).count() == 0


def test_participant_upsert_keeps_single_row(client, organizer_headers, meeting, staff, db):
    url = f"/api/events/{meeting['id']}/participants"
    first = client.post(url, json={"employeeId": staff["paul"].id}, headers=organizer_headers)
    second = client.post(url, json={"employeeId": staff["paul"].id, "statut": "refuse"}, headers=organizer_headers)
    assert first.status_code == 201
    assert second.status_code == 201

    rows = db.query(EventParticipant).filter(EventParticipant.event_id == meeting["id"]).all()
    assert len(rows) == 1
    assert rows[0].statut_participation.value == "refuse"
    assert rows[0].date_reponse is not None


def test_participant_status_must_be_known(client, organizer_headers, meeting, staff):
    response = client.post(
        f"/api/events/{meeting['id']}/participants",
        json={"employeeId": staff["paul"].id, "statut": "peut-etre"},
        headers=organizer_headers,
    )
    assert response.status_code == 400


def test_participant_for_unknown_event_or_employee(client, organizer_headers, meeting, staff):
    response = client.post("/api/events/999/participants", json={"employeeId": staff["paul"].id},
                           headers=organizer_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "EVENT_NOT_FOUND"

    response = client.post(f"/api/events/{meeting['id']}/participants", json={"employeeId": 999},
                           headers=organizer_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "EMPLOYEE_NOT_FOUND"


def test_list_participants_with_summary(client, organizer_headers, admin_headers, meeting, staff):
    url = f"/api/events/{meeting['id']}/participants"
    client.post(url, json={"employeeId": staff["paul"].id, "statut": "accepte"}, headers=organizer_headers)
    client.post(url, json={"employeeId": staff["zoe"].id, "statut": "invite"}, headers=organizer_headers)
    client.post(url, json={"employeeId": staff["lea"].id, "statut": "accepte"}, headers=organizer_headers)
    client.delete(f"/api/employees/{staff['zoe'].id}", headers=admin_headers)

    body = client.get(url, headers=organizer_headers).json()
    assert body["count"] == 2
    assert body["summary"] == {"total": 2, "accepte": 2, "invite": 0, "refuse": 0, "enAttente": 0}
    assert [p["nom"] for p in body["data"]] == ["Bernard", "Martin"]
    assert [p["nom"] for p in body["participantsByStatus"]["accepte"]] == ["Bernard", "Martin"]
    assert body["participantsByStatus"]["refuse"] == []

    event = client.get("/api/events", headers=organizer_headers).json()["data"][0]
    assert event["nombreParticipants"] == 2


def test_update_event_by_organizer(client, organizer_headers, meeting):
    response = client.put(f"/api/events/{meeting['id']}", json={"lieu": "Salle 5"}, headers=organizer_headers)
    assert response.status_code == 200
    assert response.json()["data"]["lieu"] == "Salle 5"
    assert response.json()["data"]["titre"] == meeting["titre"]


def test_update_event_by_other_user(client, user_headers, meeting):
    response = client.put(f"/api/events/{meeting['id']}", json={"lieu": "Salle 5"}, headers=user_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "EVENT_UPDATE_FORBIDDEN"


def test_update_event_by_admin(client, admin_headers, meeting):
    response = client.put(f"/api/events/{meeting['id']}", json={"est_public": False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["estPublic"] is False


def test_update_event_rechecks_merged_dates(client, organizer_headers, meeting):
    too_early = _iso(datetime.now() + timedelta(days=1))
    response = client.put(f"/api/events/{meeting['id']}", json={"date_fin": too_early}, headers=organizer_headers)
    assert response.status_code == 400


def test_update_event_with_nothing_to_update(client, organizer_headers, meeting):
    response = client.put(f"/api/events/{meeting['id']}", json={"organisateur_id": 3}, headers=organizer_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "NOTHING_TO_UPDATE"


def test_delete_event_not_implemented(client, manager_headers, user_headers, meeting):
    assert client.delete(f"/api/events/{meeting['id']}", headers=user_headers).status_code == 403
    response = client.delete(f"/api/events/{meeting['id']}", headers=manager_headers)
    assert response.status_code == 501
    assert response.json()["error"] == "Fonctionnalité de suppression non implémentée"


def test_list_events_with_filters(client, admin_headers):
    events = [
        ("Formation SQL", "formation", "2030-01-10T09:00:00", True),
        ("Congé Paul", "conge", "2030-02-01T09:00:00", False),
        ("Formation API", "formation", "2030-03-05T09:00:00", True),
    ]
    for titre, type_evenement, debut, public in events:
        client.post("/api/events", json={
            "titre": titre, "type_evenement": type_evenement, "date_debut": debut, "est_public": public,
        }, headers=admin_headers)

    def titles(**params):
        body = client.get("/api/events", params=params, headers=admin_headers).json()
        return [event["titre"] for event in body["data"]]

    assert titles() == ["Formation SQL", "Congé Paul", "Formation API"]
    assert titles(type="formation") == ["Formation SQL", "Formation API"]
    assert titles(public="false") == ["Congé Paul"]
    assert titles(dateDebut="2030-01-15T00:00:00", dateFin="2030-03-05T09:00:00") == ["Congé Paul", "Formation API"]
    assert titles(type="formation", dateDebut="2030-02-01T00:00:00") == ["Formation API"]


def test_upcoming_events_are_public_and_bounded(client, admin_headers):
    now = datetime.now()
    for titre, delta, public in [
        ("Bientôt", timedelta(days=2), True),
        ("Privé", timedelta(days=2), False),
        ("Lointain", timedelta(days=40), True),
        ("Passé", timedelta(days=-2), True),
    ]:
        client.post("/api/events", json={
            "titre": titre, "type_evenement": "evenement", "date_debut": _iso(now + delta), "est_public": public,
        }, headers=admin_headers)

    body = client.get("/api/events/upcoming", headers=admin_headers).json()
    assert [event["titre"] for event in body["data"]] == ["Bientôt"]
    assert body["periode"] == "30 prochains jours"

    body = client.get("/api/events/upcoming", params={"days": 60}, headers=admin_headers).json()
    assert [event["titre"] for event in body["data"]] == ["Bientôt", "Lointain"]

    assert client.get("/api/events/upcoming", params={"days": 0}, headers=admin_headers).status_code == 400
    assert client.get("/api/events/upcoming", params={"days": 366}, headers=admin_headers).status_code == 400


def test_birthdays_of_month(client, user_headers, staff, make_employee):
    make_employee(nom="Avant", prenom="Anne", poste="Juriste", equipe="Finance", date_anniversaire=date(1985, 3, 2))
    body = client.get("/api/events/birthdays", params={"month": 3}, headers=user_headers).json()
    assert body["mois"] == "Mars"
    assert [(b["prenom"], b["jourAnniversaire"]) for b in body["data"]] == [("Anne", 2), ("Léa", 14)]
    assert body["data"][0]["photoUrl"] == "/assets/default-avatar.png"

    assert client.get("/api/events/birthdays", params={"month": 13}, headers=user_headers).status_code == 400


def test_generate_birthday_events_is_idempotent(client, admin_headers, staff, db):
    first = client.post("/api/events/generate-birthdays", json={"year": 2026}, headers=admin_headers)
    assert first.status_code == 201
    assert first.json()["count"] == 2
    titles = {event["titre"] for event in first.json()["data"]}
    assert titles == {"Anniversaire de Léa Martin", "Anniversaire de Zoé Zidane"}

    second = client.post("/api/events/generate-birthdays", json={"year": 2026}, headers=admin_headers)
    assert second.json()["count"] == 0
    assert db.query(Event).filter(Event.type_evenement == EventType.ANNIVERSAIRE).count() == 2

    lea_event = db.query(Event).filter(Event.organisateur_id == staff["lea"].id).one()
    assert lea_event.date_debut == datetime(2026, 3, 14)
    assert lea_event.participants[0].statut_participation.value == "accepte"


def test_generate_birthday_on_leap_day(client, admin_headers, make_employee, db):
    leap = make_employee(nom="Bissextile", prenom="Léon", poste="Testeur", equipe="QA",
                         date_anniversaire=date(1996, 2, 29))
    client.post("/api/events/generate-birthdays", json={"year": 2027}, headers=admin_headers)
    event = db.query(Event).filter(Event.organisateur_id == leap.id).one()
    assert event.date_debut == datetime(2027, 2, 28)


def test_generate_birthday_year_bounds_and_role(client, admin_headers, manager_headers):
    assert client.post("/api/events/generate-birthdays", json={"year": 2019}, headers=admin_headers).status_code == 400
    assert client.post("/api/events/generate-birthdays", json={"year": 2031}, headers=admin_headers).status_code == 400
    assert client.post("/api/events/generate-birthdays", json={"year": 2026},
                       headers=manager_headers).status_code == 403


def test_event_stats(client, manager_headers, user_headers, meeting):
    assert client.get("/api/events/stats", headers=user_headers).status_code == 403
    data = client.get("/api/events/stats", headers=manager_headers).json()["data"]
    assert data["totalEvenements"] == 1
    assert data["evenementsAVenir"] == 1
    assert data["evenementsRecents"] == 1
    assert data["repartitionParType"] == {"reunion": 1}
