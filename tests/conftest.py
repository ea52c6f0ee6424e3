import os
import tempfile

# Environnement de test, avant tout import de l'application
_TMP_DIR = tempfile.mkdtemp(prefix="trombinoscope-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "test.db")
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from trombinoscope.config import settings  # noqa: E402
from trombinoscope.database import Base, SessionLocal, engine  # noqa: E402
from trombinoscope.main import app  # noqa: E402
from trombinoscope.models import team  # noqa: E402,F401
from trombinoscope.models.employee import Employee  # noqa: E402
from trombinoscope.models.user import User, UserRole  # noqa: E402
from trombinoscope.security.auth import create_access_token, hash_password  # noqa: E402

PASSWORD = "Secret123!"


@pytest.fixture(autouse=True)
def reset_database(tmp_path, monkeypatch):
    """Base vide et dossier de journaux isolé pour chaque test"""
    monkeypatch.setattr(settings, "log_dir", str(tmp_path / "logs"))
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_employee(db):
    def _make(nom="Dupont", prenom="Jean", poste="Développeur", equipe="K-Team", **kwargs):
        employee = Employee(nom=nom, prenom=prenom, poste=poste, equipe=equipe, **kwargs)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_user(db):
    def _make(username, role=UserRole.USER, is_active=True, employee_id=None, password=PASSWORD):
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
            employee_id=employee_id,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.username, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", role=UserRole.ADMIN)


@pytest.fixture
def manager_user(make_user):
    return make_user("manager", role=UserRole.MANAGER)


@pytest.fixture
def basic_user(make_user):
    return make_user("user", role=UserRole.USER)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user):
    return auth_headers(manager_user)


@pytest.fixture
def user_headers(basic_user):
    return auth_headers(basic_user)


@pytest.fixture
def staff(make_employee):
    """Petit annuaire: deux équipes, un responsable par équipe"""
    return {
        "lea": make_employee(
            nom="Martin", prenom="Léa", poste="Conseillère", equipe="K-Team",
            email="lea.martin@example.com", date_anniversaire=date(1990, 3, 14),
            date_embauche=date(2020, 1, 6),
        ),
        "paul": make_employee(
            nom="Bernard", prenom="Paul", poste="Chef de projet", equipe="K-Team",
            responsable_equipe=True, email="paul.bernard@example.com",
        ),
        "zoe": make_employee(
            nom="Zidane", prenom="Zoé", poste="Comptable", equipe="Finance",
            responsable_equipe=True, date_anniversaire=date(1988, 7, 2),
        ),
    }
