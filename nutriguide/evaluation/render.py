from __future__ import annotations

from html import escape

from .models import Finding, HealthAssessment

GENERAL_ADVICE_TITLE = "総合的なアドバイス"


def _render_list(items: list[str]) -> str:
    if not items:
        return ""
    lines = "".join(f"<li>{escape(item)}</li>" for item in items)
    return f"<ul>{lines}</ul>"


def _render_finding(finding: Finding) -> str:
    return (
        f"<h4>{escape(finding.title)}</h4>"
        f"<p>{escape(finding.summary)}</p>"
        f"{_render_list(finding.actions)}"
    )


def render_assessment(assessment: HealthAssessment) -> str:
    """Render an assessment into the advisory markup consumed by the UI and later stages."""
    if assessment.error is not None:
        return f"<p>{escape(assessment.error)}</p>"

    parts = [_render_finding(f) for f in assessment.findings]
    parts.append(f"<h4>{GENERAL_ADVICE_TITLE}</h4>")
    parts.append(_render_list(assessment.general_advice))
    if assessment.closing:
        parts.append(f"<p>{escape(assessment.closing)}</p>")
    return "".join(parts)
