"""
Connexion à la base de données
Gestion SQLAlchemy (une session par opération logique)
"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base
from trombinoscope.config import settings

logger = logging.getLogger(__name__)

_connect_args = {}
if settings.database_url.startswith("sqlite"):
    _connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance de session de base de données"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_conflict(db, message: str, code: str = "CONFLICT") -> None:
    """Validation de la transaction; une violation d'unicité devient un conflit 409"""
    from trombinoscope.utils.exceptions import DuplicateException

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateException(message, code=code)


def init_db(seed_admin: bool = True) -> None:
    """Création des tables et index, puis du compte administrateur initial"""
    # enregistrement des modèles sur Base.metadata
    from trombinoscope.models import employee, event as event_models, team, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Tables créées/vérifiées")

    if seed_admin:
        from trombinoscope.services.user_service import UserService

        db = SessionLocal()
        try:
            UserService.ensure_admin(db)
        finally:
            db.close()
