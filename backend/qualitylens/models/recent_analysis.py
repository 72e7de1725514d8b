from sqlalchemy import Column, Integer, String, Float, DateTime
from datetime import datetime
from qualitylens.database import Base


class RecentAnalysis(Base):
    __tablename__ = "recent_analyses"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String, nullable=False, unique=True)  # one entry per file, latest wins

    overall_score = Column(Float, nullable=True)  # 0-100
    row_count = Column(Integer, nullable=True)
    column_count = Column(Integer, nullable=True)
    issue_count = Column(Integer, nullable=True)

    analysed_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "overallScore": self.overall_score,
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "issueCount": self.issue_count,
            "analysedAt": self.analysed_at.isoformat() if self.analysed_at else None,
        }
