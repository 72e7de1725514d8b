from sqlalchemy import Column, Integer, String, Float, DateTime, JSON
from datetime import datetime
from qualitylens.database import Base


class QualityHistory(Base):
    __tablename__ = "quality_history"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String, nullable=False, index=True)

    # Snapshot of the analysis scores
    overall_score = Column(Float, nullable=False)  # 0-100
    scores = Column(JSON, nullable=False)          # {completeness, uniqueness, validity, consistency}

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "overallScore": self.overall_score,
            "scores": self.scores,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }
