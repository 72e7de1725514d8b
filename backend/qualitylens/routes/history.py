from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from qualitylens.database import get_db
from qualitylens.schemas.analysis import (
    QualityHistoryCreate,
    QualityHistoryResponse,
    RecentAnalysisCreate,
    RecentAnalysisResponse,
)
from qualitylens.services.history import (
    add_quality_history,
    add_recent_analysis,
    get_quality_history,
    get_recent_analyses,
)

router = APIRouter(tags=["history"])


# ── Quality history ───────────────────────────────────────────────────────────

@router.get("/quality-history", response_model=List[QualityHistoryResponse])
def list_quality_history(
    file_name: Optional[str] = Query(None, alias="fileName"),
    limit: int = Query(200, ge=1, le=5000),
    db: Session = Depends(get_db),
):
    """Score snapshots, newest first."""
    return [entry.to_dict() for entry in get_quality_history(db, file_name, limit)]


@router.post("/quality-history", response_model=QualityHistoryResponse, status_code=201)
def create_quality_history(body: QualityHistoryCreate, db: Session = Depends(get_db)):
    entry = add_quality_history(db, body.fileName, body.overallScore, body.scores, body.timestamp)
    return entry.to_dict()


# ── Recent analyses ───────────────────────────────────────────────────────────

@router.get("/recent-analyses", response_model=List[RecentAnalysisResponse])
def list_recent_analyses(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return [entry.to_dict() for entry in get_recent_analyses(db, limit)]


@router.post("/recent-analyses", response_model=RecentAnalysisResponse, status_code=201)
def create_recent_analysis(body: RecentAnalysisCreate, db: Session = Depends(get_db)):
    entry = add_recent_analysis(
        db,
        body.fileName,
        overall_score=body.overallScore,
        row_count=body.rowCount,
        column_count=body.columnCount,
        issue_count=body.issueCount,
    )
    return entry.to_dict()
