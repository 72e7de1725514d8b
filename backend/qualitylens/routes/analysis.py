import asyncio
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from qualitylens.config import settings
from qualitylens.database import get_db
from qualitylens.schemas.analysis import AnalysisResponse, InsightsRequest
from qualitylens.services.ai_insights import generate_insights
from qualitylens.services.history import add_quality_history, add_recent_analysis
from qualitylens.services.ingestion import (
    IngestionError,
    ParsedFile,
    get_file_info,
    parse_file,
    validate_parsed_data,
)
from qualitylens.services.quality import QualityAnalysis, analyze_data_quality

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyses", tags=["analyses"])


async def read_upload(file: UploadFile) -> tuple[dict, ParsedFile, dict]:
    """Read, check, parse and validate an upload; raises 400 on anything unusable."""
    content = await file.read()
    info = get_file_info(file.filename or "", len(content))
    if not info["isSupported"]:
        raise HTTPException(status_code=400, detail="Only CSV and JSON files are supported")
    if not info["withinSizeLimit"]:
        raise HTTPException(
            status_code=400,
            detail=f"File exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB upload limit",
        )

    try:
        parsed = await asyncio.to_thread(parse_file, content, info["name"])
    except IngestionError as e:
        logger.info("Rejected upload %s: %s", info["name"], e.message)
        raise HTTPException(status_code=400, detail=e.to_dict())

    validation = validate_parsed_data(parsed)
    if not validation["isValid"]:
        raise HTTPException(status_code=400, detail=validation)
    return info, parsed, validation


def _analyse_and_record(parsed: ParsedFile, db: Session) -> QualityAnalysis:
    """Runs in a worker thread: engine pass plus history writes."""
    analysis = analyze_data_quality(parsed.dataset, max_workers=settings.ANALYSIS_MAX_WORKERS)

    add_quality_history(db, parsed.file_name, analysis.overall_score, analysis.scores.to_dict())
    add_recent_analysis(
        db,
        parsed.file_name,
        overall_score=analysis.overall_score,
        row_count=parsed.row_count,
        column_count=parsed.column_count,
        issue_count=len(analysis.issues),
    )
    return analysis


@router.post("", response_model=AnalysisResponse)
async def create_analysis(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Upload a CSV or JSON file and return its full quality analysis."""
    info, parsed, validation = await read_upload(file)
    analysis = await asyncio.to_thread(_analyse_and_record, parsed, db)
    return {"file": info, "validation": validation, "analysis": analysis.to_dict()}


@router.post("/insights")
def create_insights(body: InsightsRequest):
    """Narrative insights for a previously returned analysis. Always 200."""
    return generate_insights(body.analysis)
