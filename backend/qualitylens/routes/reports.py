import asyncio
import io

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import StreamingResponse

from qualitylens.config import settings
from qualitylens.routes.analysis import read_upload
from qualitylens.services.ai_insights import generate_insights
from qualitylens.services.ingestion import ParsedFile
from qualitylens.services.quality import analyze_data_quality
from qualitylens.services.report_generator import MEDIA_TYPES, build_report

router = APIRouter(prefix="/reports", tags=["reports"])


def _render_report(fmt: str, parsed: ParsedFile, include_insights: bool) -> tuple[str, str, str]:
    """Runs in a worker thread: engine pass, optional narrator call and rendering."""
    analysis = analyze_data_quality(parsed.dataset, max_workers=settings.ANALYSIS_MAX_WORKERS).to_dict()
    insights = generate_insights(analysis) if include_insights else None

    file_info = {
        "fileName": parsed.file_name,
        "fileSize": parsed.file_size,
        "headers": parsed.headers,
    }
    return build_report(fmt, file_info, analysis, insights)


@router.post("/{fmt}")
async def download_report(
    fmt: str,
    file: UploadFile = File(...),
    include_insights: bool = Form(False),
):
    """Analyse an uploaded file and stream the report as txt, csv or json."""
    if fmt not in MEDIA_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported report format: {fmt}")

    _, parsed, _ = await read_upload(file)
    content, filename, media_type = await asyncio.to_thread(
        _render_report, fmt, parsed, include_insights
    )

    return StreamingResponse(
        io.BytesIO(content.encode("utf-8")),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
