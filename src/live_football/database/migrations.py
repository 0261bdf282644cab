"""Schema versioning and migration hooks.

Each entry of MIGRATIONS upgrades the schema from ``version - 1`` to
``version``. New migrations are appended with the next integer; init_db()
runs every migration above the stored version and stamps the result.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from ..utils.odds import parse_int, parse_price
from .models import Base, BetTicket, SchemaVersion

logger = logging.getLogger(__name__)


def _create_initial_schema(connection: Connection) -> None:
    Base.metadata.create_all(bind=connection)


MIGRATIONS: Dict[int, Callable[[Connection], None]] = {
    1: _create_initial_schema,
}

CURRENT_VERSION = max(MIGRATIONS)


def get_schema_version(connection: Connection) -> int:
    """Stored schema version, 0 for an empty database."""
    if not inspect(connection).has_table(SchemaVersion.__tablename__):
        return 0
    row = connection.execute(
        SchemaVersion.__table__.select().order_by(SchemaVersion.id.desc()).limit(1)
    ).first()
    return row.version if row else 0


def run_migrations(connection: Connection) -> int:
    """Apply pending migrations. Returns the resulting version."""
    version = get_schema_version(connection)
    if version > CURRENT_VERSION:
        raise RuntimeError(
            f"Database schema version {version} is newer than supported version {CURRENT_VERSION}"
        )

    for target in range(version + 1, CURRENT_VERSION + 1):
        logger.info(f"Migrating database schema to version {target}")
        MIGRATIONS[target](connection)
        connection.execute(
            SchemaVersion.__table__.insert().values(version=target, migrated_at=datetime.now())
        )
        version = target

    return version


# Status names used by the browser ledger export
_LEGACY_STATUS = {"pending", "won", "lost", "push", "won_half", "lost_half"}


def _legacy_created_at(record: Dict[str, Any]) -> Optional[datetime]:
    """createdAt in epoch ms, falling back to the time-based id."""
    millis = parse_int(record.get("createdAt")) or parse_int(record.get("id"))
    if millis <= 0:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000)
    except (OverflowError, OSError, ValueError):
        return None


def import_legacy_tickets(session: Session, records: Iterable[Dict[str, Any]]) -> int:
    """Import tickets from the flat JSON array the browser ledger kept.

    Records without a match id, handicap, positive stake or positive odds
    are skipped. Returns the number of imported tickets.
    """
    imported = 0
    for record in records:
        if not isinstance(record, dict):
            continue
        stake = parse_price(record.get("stake"))
        odds = parse_price(record.get("odds"))
        match_id = str(record.get("matchId") or "")
        handicap = str(record.get("handicap") or "")
        if not match_id or not handicap or stake <= 0 or odds <= 0:
            logger.debug(f"Skipping legacy ticket {record.get('id')}")
            continue

        status = record.get("status") if record.get("status") in _LEGACY_STATUS else "pending"
        session.add(BetTicket(
            match_id=match_id,
            match_name=str(record.get("matchName") or ""),
            bet_type=str(record.get("betType") or ""),
            handicap=handicap,
            odds=odds,
            stake=stake,
            minute=parse_int(record.get("minute")),
            score_at_bet=record.get("scoreAtBet"),
            status=status,
            notes=record.get("notes") or None,
            created_at=_legacy_created_at(record) or datetime.now(),
        ))
        imported += 1

    logger.info(f"Imported {imported} legacy tickets")
    return imported
