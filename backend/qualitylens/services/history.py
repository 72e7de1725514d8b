"""
Quality history & recent analyses — append-only score snapshots per file
plus a short most-recently-analysed list.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from qualitylens.config import settings
from qualitylens.models.quality_history import QualityHistory
from qualitylens.models.recent_analysis import RecentAnalysis

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Quality history
# ─────────────────────────────────────────────────────────────────────────────

def add_quality_history(
    db: Session,
    file_name: str,
    overall_score: float,
    scores: dict,
    timestamp: Optional[datetime] = None,
    retention: Optional[int] = None,
) -> QualityHistory:
    """Append a snapshot and trim the table to the newest ``retention`` rows."""
    entry = QualityHistory(
        file_name=file_name,
        overall_score=float(overall_score),
        scores=dict(scores),
        created_at=timestamp or datetime.utcnow(),
    )
    db.add(entry)
    db.flush()

    keep = retention if retention is not None else settings.QUALITY_HISTORY_LIMIT
    stale = (
        db.query(QualityHistory)
        .order_by(QualityHistory.created_at.desc(), QualityHistory.id.desc())
        .offset(keep)
        .all()
    )
    for row in stale:
        db.delete(row)

    db.commit()
    db.refresh(entry)
    logger.info("Recorded quality snapshot for %s (%.1f)", file_name, entry.overall_score)
    return entry


def get_quality_history(
    db: Session, file_name: Optional[str] = None, limit: int = 200
) -> list[QualityHistory]:
    """Snapshots newest first, optionally for one file."""
    query = db.query(QualityHistory)
    if file_name:
        query = query.filter(QualityHistory.file_name == file_name)
    return (
        query.order_by(QualityHistory.created_at.desc(), QualityHistory.id.desc())
        .limit(limit)
        .all()
    )


# ─────────────────────────────────────────────────────────────────────────────
# Recent analyses
# ─────────────────────────────────────────────────────────────────────────────

def add_recent_analysis(
    db: Session,
    file_name: str,
    overall_score: Optional[float] = None,
    row_count: Optional[int] = None,
    column_count: Optional[int] = None,
    issue_count: Optional[int] = None,
    retention: Optional[int] = None,
) -> RecentAnalysis:
    """Upsert by file name (latest wins) and keep only the newest entries."""
    entry = db.query(RecentAnalysis).filter(RecentAnalysis.file_name == file_name).first()
    if entry is None:
        entry = RecentAnalysis(file_name=file_name)
        db.add(entry)

    entry.overall_score = overall_score
    entry.row_count = row_count
    entry.column_count = column_count
    entry.issue_count = issue_count
    entry.analysed_at = datetime.utcnow()
    db.flush()

    keep = retention if retention is not None else settings.RECENT_ANALYSES_LIMIT
    stale = (
        db.query(RecentAnalysis)
        .order_by(RecentAnalysis.analysed_at.desc(), RecentAnalysis.id.desc())
        .offset(keep)
        .all()
    )
    for row in stale:
        db.delete(row)

    db.commit()
    db.refresh(entry)
    return entry


def get_recent_analyses(db: Session, limit: int = 5) -> list[RecentAnalysis]:
    return (
        db.query(RecentAnalysis)
        .order_by(RecentAnalysis.analysed_at.desc(), RecentAnalysis.id.desc())
        .limit(limit)
        .all()
    )
