"""
AI Insight Generator — narrative summary, critical issues, recommendations
and a readiness verdict for a finished quality analysis.

The narrator is injected by the caller; the scoring core never talks to the
network. Any narrator failure falls back to deterministic templates built
from ``overallScore`` and ``issues`` only.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Optional, Protocol

from openai import OpenAI

from qualitylens.config import settings

logger = logging.getLogger(__name__)

READY_THRESHOLD = 70

SYSTEM_PROMPT = (
    "You are a data quality expert who explains analysis results in plain, non-technical language. "
    "Your explanations should be clear, actionable, and accessible to business users without "
    "technical backgrounds. Focus on practical impact and specific recommendations."
)


class Narrator(Protocol):
    model: str

    def narrate(self, analysis: dict) -> dict:
        ...


def _parse_json(text: str):
    clean = re.sub(r"```[a-z]*\n?", "", text).strip()
    return json.loads(clean)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_context(analysis: dict) -> dict:
    issues = analysis.get("issues", [])
    summary = analysis.get("summary", {})
    return {
        "totalIssues": len(issues),
        "criticalIssues": sum(1 for i in issues if i.get("severity") == "high"),
        "mediumIssues": sum(1 for i in issues if i.get("severity") == "medium"),
        "lowIssues": sum(1 for i in issues if i.get("severity") == "low"),
        "dataSize": f"{summary.get('totalRows', 0)} rows × {summary.get('totalColumns', 0)} columns",
    }


def build_prompt(analysis: dict) -> str:
    scores = analysis["scores"]
    summary = analysis["summary"]
    issues = analysis.get("issues", [])
    column_stats = analysis.get("columnStats", {})

    top_issues = "\n".join(f"- {i['description']} [{i['severity']}]" for i in issues[:5])
    column_lines = "\n".join(
        f"- {col}: {stats['type']['type']} ({stats['missing']['percentage']:.1f}% missing, "
        f"{stats['unique']} unique values)"
        for col, stats in list(column_stats.items())[:5]
    )

    return f"""Analyze this dataset quality report and provide insights:

Dataset Summary:
- Total Rows: {summary['totalRows']}
- Total Columns: {summary['totalColumns']}
- Overall Quality Score: {analysis['overallScore']:.1f}/100

Quality Dimensions:
- Completeness: {scores['completeness']:.1f}/100 ({summary['missingCells']} missing values)
- Uniqueness: {scores['uniqueness']:.1f}/100 ({summary['duplicateRows']} duplicates)
- Validity: {scores['validity']:.1f}/100
- Consistency: {scores['consistency']:.1f}/100

Top Issues:
{top_issues}

Column Details:
{column_lines}

Please provide:
1. A brief summary of the overall data quality (2-3 sentences)
2. The top 3 most critical issues and their business impact
3. Specific, actionable recommendations to improve quality
4. An assessment of whether this data is ready for analysis or needs cleaning

Return ONLY valid JSON:
{{
  "summary": "overall assessment",
  "criticalIssues": [
    {{"issue": "description", "impact": "business impact", "severity": "high/medium/low"}}
  ],
  "recommendations": [
    {{"title": "short title", "description": "detailed action", "priority": "high/medium/low"}}
  ],
  "readiness": {{"ready": true, "reason": "explanation"}}
}}"""


class OpenAINarrator:
    """Narrator backed by an OpenAI chat completion."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL

    def narrate(self, analysis: dict) -> dict:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(analysis)},
            ],
            temperature=0.7,
            max_tokens=1500,
            response_format={"type": "json_object"},
        )
        result = _parse_json(response.choices[0].message.content)
        if not isinstance(result, dict) or "summary" not in result:
            raise ValueError("Narrator response is missing a summary")
        return result


def default_narrator() -> Optional[Narrator]:
    """OpenAI narrator when an API key is configured, else None."""
    if not settings.OPENAI_API_KEY:
        return None
    return OpenAINarrator()


# ─────────────────────────────────────────────────────────────────────────────
# Fallback
# ─────────────────────────────────────────────────────────────────────────────

FALLBACK_RECOMMENDATIONS = [
    {
        "title": "Address Missing Values",
        "description": "Review columns with high percentages of missing data and determine appropriate handling strategies.",
        "priority": "high",
    },
    {
        "title": "Remove Duplicates",
        "description": "Identify and remove duplicate records to improve data uniqueness.",
        "priority": "medium",
    },
    {
        "title": "Standardize Data Types",
        "description": "Ensure consistent data types across all columns.",
        "priority": "medium",
    },
]


def _score_band(score: float) -> str:
    if score >= 90:
        return "The data appears to be in excellent condition."
    if score >= READY_THRESHOLD:
        return "The data quality is acceptable but has some issues to address."
    return "The data quality needs significant improvement before analysis."


def fallback_insights(analysis: dict) -> dict:
    """Deterministic insights derived from overallScore and issues."""
    score = float(analysis.get("overallScore", 0))
    issues = analysis.get("issues", [])
    ready = score >= READY_THRESHOLD

    return {
        "summary": f"This dataset has an overall quality score of {score:.0f}/100. {_score_band(score)}",
        "criticalIssues": [
            {
                "issue": issue.get("description"),
                "impact": "This may affect the reliability of analysis results.",
                "severity": issue.get("severity"),
            }
            for issue in issues
            if issue.get("severity") == "high"
        ][:3],
        "recommendations": [dict(rec) for rec in FALLBACK_RECOMMENDATIONS],
        "readiness": {
            "ready": ready,
            "reason": (
                "The data quality is sufficient for initial analysis."
                if ready
                else "Significant data cleaning is recommended before proceeding with analysis."
            ),
        },
        "generated": _now(),
        "model": "fallback",
        "context": build_context(analysis),
    }


def generate_insights(analysis: dict, narrator: Optional[Narrator] = None) -> dict:
    """
    Narrative insights for a serialised QualityAnalysis. Never raises: without a
    narrator the fallback is returned as-is; when the narrator fails or returns
    something that is not a mapping the fallback carries ``error``/``errorMessage``.
    """
    narrator = narrator or default_narrator()
    if narrator is None:
        logger.info("No narrator configured; using fallback insights")
        return fallback_insights(analysis)

    try:
        result = narrator.narrate(analysis)
        insights = {
            **result,
            "generated": _now(),
            "model": getattr(narrator, "model", "unknown"),
            "context": build_context(analysis),
        }
    except Exception:
        logger.exception("Insight generation failed; using fallback insights")
        insights = fallback_insights(analysis)
        insights["error"] = True
        insights["errorMessage"] = "AI service temporarily unavailable, showing fallback insights"

    return insights


# ─────────────────────────────────────────────────────────────────────────────
# Lightweight helpers
# ─────────────────────────────────────────────────────────────────────────────

def get_recommendations(analysis: dict) -> list[dict]:
    """Per-issue-type recommendations without calling a narrator."""
    issues = analysis.get("issues") or []
    if not issues:
        return [{
            "title": "Excellent Data Quality",
            "description": "Your dataset appears to be in good shape with no major issues detected.",
            "priority": "low",
            "type": "positive",
        }]

    kinds = {issue.get("type") for issue in issues}
    recommendations = []
    if "missing" in kinds:
        recommendations.append({
            "title": "Handle Missing Values",
            "description": "Consider imputation strategies or removal based on business requirements.",
            "priority": "high",
            "type": "missing",
        })
    if "duplicate" in kinds:
        recommendations.append({
            "title": "Remove Duplicate Records",
            "description": "Identify unique identifiers and remove duplicate entries.",
            "priority": "high",
            "type": "duplicate",
        })
    if "inconsistent" in kinds:
        recommendations.append({
            "title": "Standardize Data Types",
            "description": "Ensure all values in each column conform to the expected data type.",
            "priority": "medium",
            "type": "inconsistent",
        })
    return recommendations


def explain_metric(metric_name: str, score: float) -> str:
    if score >= 90:
        verdict = "Excellent!"
    elif score >= 70:
        verdict = "Good, but could be improved."
    else:
        verdict = "Needs attention."
    return f"{metric_name} score is {score:g}/100. {verdict}"