from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional


class FileInfo(BaseModel):
    name: str
    extension: str
    size: int
    sizeFormatted: str
    isSupported: bool
    withinSizeLimit: bool


class ValidationIssue(BaseModel):
    type: str
    message: str


class ValidationResult(BaseModel):
    isValid: bool
    issues: List[ValidationIssue] = []


class AnalysisResponse(BaseModel):
    file: FileInfo
    validation: ValidationResult
    analysis: Dict[str, Any]


class InsightsRequest(BaseModel):
    analysis: Dict[str, Any]


class QualityHistoryCreate(BaseModel):
    fileName: str
    overallScore: float
    scores: Dict[str, float]
    timestamp: Optional[datetime] = None


class QualityHistoryResponse(BaseModel):
    id: int
    fileName: str
    overallScore: float
    scores: Dict[str, float]
    timestamp: Optional[str] = None


class RecentAnalysisCreate(BaseModel):
    fileName: str
    overallScore: Optional[float] = None
    rowCount: Optional[int] = None
    columnCount: Optional[int] = None
    issueCount: Optional[int] = None


class RecentAnalysisResponse(BaseModel):
    id: int
    fileName: str
    overallScore: Optional[float] = None
    rowCount: Optional[int] = None
    columnCount: Optional[int] = None
    issueCount: Optional[int] = None
    analysedAt: Optional[str] = None
