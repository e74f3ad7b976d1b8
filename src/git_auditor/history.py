"""Audit history: save finished audits and read them back."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select

from .core.models import AuditReport
from .db import get_session_factory
from .sqlmodels import AuditRecord, Meta

logger = logging.getLogger(__name__)

LAST_USERNAME_KEY = "last_username"


async def save_audit(report: AuditReport) -> int:
    """Persist ``report`` and remember its username. Returns the record id."""
    result = report.result
    session_factory = get_session_factory()
    now = datetime.utcnow()

    async with session_factory() as session:
        record = AuditRecord(
            username=report.username,
            global_score=result.global_score,
            grade=result.grade.value,
            categories=json.dumps({cat.value: pct for cat, pct in result.categories.items()}),
            red_flag_count=len(result.red_flags),
            check_count=len(result.checks),
            created_at=now,
        )
        session.add(record)

        row = (await session.execute(
            select(Meta).where(Meta.key == LAST_USERNAME_KEY)
        )).scalar_one_or_none()
        if row:
            row.value = report.username
            row.updated_at = now
        else:
            session.add(Meta(key=LAST_USERNAME_KEY, value=report.username, updated_at=now))

        await session.commit()
        record_id = record.id

    logger.info("Saved audit #%d for %s", record_id, report.username)
    return record_id


async def list_audits(limit: int = 20, username: Optional[str] = None) -> list[dict]:
    """Most recent audits first."""
    session_factory = get_session_factory()

    async with session_factory() as session:
        query = select(AuditRecord).order_by(AuditRecord.created_at.desc(), AuditRecord.id.desc())
        if username:
            query = query.where(AuditRecord.username == username)
        result = await session.execute(query.limit(limit))
        rows = result.scalars().all()

    return [
        {
            "id": r.id,
            "username": r.username,
            "global_score": r.global_score,
            "grade": r.grade,
            "categories": json.loads(r.categories) if r.categories else {},
            "red_flag_count": r.red_flag_count,
            "check_count": r.check_count,
            "created_at": r.created_at.isoformat(),
        }
        for r in rows
    ]


async def last_username() -> Optional[str]:
    session_factory = get_session_factory()
    async with session_factory() as session:
        row = (await session.execute(
            select(Meta).where(Meta.key == LAST_USERNAME_KEY)
        )).scalar_one_or_none()
    return row.value if row else None
