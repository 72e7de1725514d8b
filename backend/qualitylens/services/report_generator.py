"""
Report generator — plain-text, CSV and JSON exports of a QualityAnalysis.

All functions work on the serialised (camelCase dict) form of the analysis
so that reports can be produced for analyses posted back by a client.
"""

import csv
import io
import json
import os
from datetime import date, datetime, timezone
from typing import Optional

from qualitylens.services.ingestion import format_file_size

RULE = "-" * 80

MEDIA_TYPES = {
    "txt": "text/plain",
    "csv": "text/csv",
    "json": "application/json",
}


def get_score_grade(score: float) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Good"
    if score >= 70:
        return "Fair"
    if score >= 60:
        return "Poor"
    return "Critical"


def _missing_pct(summary: dict) -> float:
    total = summary.get("totalCells", 0)
    return (summary.get("missingCells", 0) / total) * 100 if total else 0.0


def generate_text_report(file_info: dict, analysis: dict, insights: Optional[dict] = None) -> str:
    """Human-readable report. ``file_info`` needs fileName, fileSize and headers."""
    summary = analysis["summary"]
    scores = analysis["scores"]
    lines = [
        "DATA QUALITY ANALYSIS REPORT",
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        RULE,
        "",
        "FILE INFORMATION",
        RULE,
        f"File Name: {file_info.get('fileName')}",
        f"File Size: {format_file_size(file_info.get('fileSize', 0))}",
        f"Total Rows: {summary['totalRows']}",
        f"Total Columns: {summary['totalColumns']}",
        f"Total Cells: {summary['totalCells']}",
        "",
        f"OVERALL QUALITY SCORE: {analysis['overallScore']:.1f}/100",
        f"Grade: {get_score_grade(analysis['overallScore'])}",
        RULE,
        "",
        "QUALITY DIMENSIONS",
        RULE,
        f"Completeness:  {scores['completeness']:.1f}/100",
        f"Uniqueness:    {scores['uniqueness']:.1f}/100",
        f"Validity:      {scores['validity']:.1f}/100",
        f"Consistency:   {scores['consistency']:.1f}/100",
        "",
        "DATA SUMMARY",
        RULE,
        f"Missing Cells:   {summary['missingCells']} ({_missing_pct(summary):.2f}%)",
        f"Duplicate Rows:  {summary['duplicateRows']}",
        f"Issues Detected: {summary['issueCount']}",
        "",
        "COLUMN ANALYSIS",
        RULE,
    ]

    for header in file_info.get("headers", analysis["columnStats"].keys()):
        stats = analysis["columnStats"][header]
        lines.append("")
        lines.append(f"{header}:")
        lines.append(f"  Type: {stats['type']['type']} ({stats['type']['confidence'] * 100:.0f}% confidence)")
        lines.append(f"  Missing: {stats['missing']['count']} ({stats['missing']['percentage']:.1f}%)")
        lines.append(f"  Unique Values: {stats['unique']} ({stats['uniquePercentage']:.1f}%)")
        statistics = stats.get("statistics")
        if statistics:
            lines.append("  Statistics:")
            lines.append(f"    Mean: {statistics['mean']:.2f}")
            lines.append(f"    Median: {statistics['median']:.2f}")
            lines.append(f"    Std Dev: {statistics['stdDev']:.2f}")
            lines.append(f"    Min: {statistics['min']:g}")
            lines.append(f"    Max: {statistics['max']:g}")
        outliers = stats.get("outliers")
        if outliers and outliers["count"] > 0:
            lines.append(f"  Outliers: {outliers['count']} ({outliers['percentage']:.1f}%)")

    issues = analysis.get("issues", [])
    if issues:
        lines += ["", "", "ISSUES DETECTED", RULE]
        for severity in ("high", "medium", "low"):
            group = [i for i in issues if i["severity"] == severity]
            if not group:
                continue
            lines.append("")
            lines.append(f"{severity.upper()} SEVERITY ({len(group)}):")
            for index, issue in enumerate(group, start=1):
                lines.append(f"  {index}. {issue['description']}")
                if issue.get("column"):
                    lines.append(f"     Column: {issue['column']}")

    if insights:
        lines += ["", "", "AI-POWERED INSIGHTS", RULE, "", "Summary:", insights.get("summary", "")]
        critical = insights.get("criticalIssues") or []
        if critical:
            lines.append("")
            lines.append("Critical Issues:")
            for index, item in enumerate(critical, start=1):
                lines.append(f"{index}. {item.get('issue')}")
                lines.append(f"   Impact: {item.get('impact')}")
        recommendations = insights.get("recommendations") or []
        if recommendations:
            lines.append("")
            lines.append("Recommendations:")
            for index, rec in enumerate(recommendations, start=1):
                lines.append(f"{index}. {rec.get('title')} [{rec.get('priority')}]")
                lines.append(f"   {rec.get('description')}")
                if rec.get("sql"):
                    lines.append(f"   SQL: {rec['sql']}")
        readiness = insights.get("readiness") or {}
        lines.append("")
        lines.append(f"Data Readiness: {'READY' if readiness.get('ready') else 'NOT READY'}")
        lines.append(f"Reason: {readiness.get('reason', '')}")

    lines += ["", RULE, "END OF REPORT", ""]
    return "\n".join(lines)


def generate_csv_report(analysis: dict, headers: list) -> str:
    """One row per column with type, missing and uniqueness figures."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([
        "Column", "Data Type", "Confidence", "Missing Count", "Missing %",
        "Unique Values", "Unique %", "Has Issues",
    ])
    issue_columns = {i.get("column") for i in analysis.get("issues", [])}
    for header in headers:
        stats = analysis["columnStats"][header]
        writer.writerow([
            header,
            stats["type"]["type"],
            f"{stats['type']['confidence'] * 100:.1f}",
            stats["missing"]["count"],
            f"{stats['missing']['percentage']:.1f}",
            stats["unique"],
            f"{stats['uniquePercentage']:.1f}",
            "Yes" if header in issue_columns else "No",
        ])
    return buffer.getvalue()


def generate_json_report(file_info: dict, analysis: dict, insights: Optional[dict] = None) -> str:
    headers = file_info.get("headers", list(analysis["columnStats"].keys()))
    report = {
        "metadata": {
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "fileName": file_info.get("fileName"),
            "fileSize": file_info.get("fileSize"),
            "rowCount": analysis["summary"]["totalRows"],
            "columnCount": analysis["summary"]["totalColumns"],
        },
        "overallScore": analysis["overallScore"],
        "scores": analysis["scores"],
        "summary": analysis["summary"],
        "columns": {header: analysis["columnStats"][header] for header in headers},
        "issues": analysis.get("issues", []),
    }
    if insights:
        report["aiInsights"] = insights
    return json.dumps(report, indent=2, default=str)


def build_report(
    fmt: str, file_info: dict, analysis: dict, insights: Optional[dict] = None
) -> tuple[str, str, str]:
    """Return (content, filename, media_type) for txt / csv / json."""
    stem = os.path.splitext(file_info.get("fileName") or "dataset")[0]
    filename = f"{stem}_quality_report_{date.today().isoformat()}.{fmt}"

    if fmt == "txt":
        content = generate_text_report(file_info, analysis, insights)
    elif fmt == "csv":
        headers = file_info.get("headers", list(analysis["columnStats"].keys()))
        content = generate_csv_report(analysis, headers)
    elif fmt == "json":
        content = generate_json_report(file_info, analysis, insights)
    else:
        raise ValueError(f"Unsupported report format: {fmt}")

    return content, filename, MEDIA_TYPES[fmt]
