"""
Journal d'audit en lignes JSON
L'écriture d'un journal ne fait jamais échouer l'opération principale
"""
import json
import logging
import time
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from trombinoscope.config import settings

logger = logging.getLogger(__name__)

ACCESS_LOG = "access.log"
ERROR_LOG = "error.log"
AUDIT_LOG = "audit.log"


def log_dir() -> Path:
    return Path(settings.log_dir)


def write_log(entry: dict, filename: str = ACCESS_LOG) -> None:
    """Ajout d'une ligne JSON au fichier de journal"""
    try:
        directory = log_dir()
        directory.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry, ensure_ascii=False, default=str)
        with open(directory / filename, "a", encoding="utf-8") as fh:
            fh.write(line + "\n")
    except Exception as exc:
        logger.warning("Erreur écriture log %s: %s", filename, exc)


def _user_label(user: Any) -> str:
    if user is None:
        return "system"
    if isinstance(user, str):
        return user
    return getattr(user, "username", None) or "system"


def log_event(event: str, user: Any = None, details: Optional[dict] = None) -> None:
    """Événement métier (acteur = nom d'utilisateur ou "system")"""
    write_log(
        {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "type": "BUSINESS_EVENT",
            "event": event,
            "user": _user_label(user),
            "details": details or {},
        },
        AUDIT_LOG,
    )


def clean_old_logs(retention_days: Optional[int] = None) -> list[str]:
    """Suppression des fichiers de journal plus anciens que N jours"""
    if retention_days is None:
        retention_days = settings.log_retention_days
    cutoff = time.time() - retention_days * 24 * 60 * 60
    removed = []
    directory = log_dir()
    if not directory.is_dir():
        return removed
    for path in directory.iterdir():
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink()
                removed.append(path.name)
                logger.info("Log ancien supprimé: %s", path.name)
        except OSError as exc:
            logger.warning("Erreur nettoyage log %s: %s", path.name, exc)
    return removed


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.rstrip("Z"))


def generate_log_stats(start: datetime, end: datetime, filename: str = ACCESS_LOG) -> Optional[dict]:
    """Statistiques d'utilisation sur le journal d'accès (lignes invalides ignorées)"""
    path = log_dir() / filename
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        logger.warning("Erreur génération statistiques: %s", exc)
        return None

    total = 0
    errors = 0
    users = Counter()
    endpoints = Counter()
    for line in lines:
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
            stamp = _parse_timestamp(entry["timestamp"])
        except (ValueError, KeyError, TypeError):
            continue
        if not (start <= stamp <= end):
            continue
        total += 1
        if int(entry.get("statusCode", 0)) >= 400:
            errors += 1
        user = entry.get("user")
        if user and user != "anonymous":
            users[user] += 1
        endpoints[entry.get("url")] += 1

    return {
        "totalRequests": total,
        "errorCount": errors,
        "userActivity": dict(users),
        "popularEndpoints": dict(endpoints.most_common()),
        "timeRange": {"start": start.isoformat(), "end": end.isoformat()},
    }
