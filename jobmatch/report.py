"""Markdown report of ranked recommendations."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jobmatch.config import REPORTS_DIR
from jobmatch.log import get_logger
from jobmatch.models import ScoredItem

log = get_logger(__name__)

# (minimum score on a 0-100 scale, label)
SCORE_BANDS: list[tuple[float, str]] = [
    (90, "매우 높음"),
    (70, "높음"),
    (50, "보통"),
    (30, "낮음"),
]


def score_label(score: float) -> str:
    for minimum, label in SCORE_BANDS:
        if score >= minimum:
            return label
    return "매우 낮음"


def _clip(text: str, width: int) -> str:
    return text[:width] + ("…" if len(text) > width else "")


def build_report(ranked: list[ScoredItem], *, user_id: str, mode: str = "hybrid") -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    lines: list[str] = [f"# Recommendations for {user_id} — {date}", ""]
    lines.append(f"**{len(ranked)}** items ranked | mode: **{mode}**")
    lines.append("")

    top = ranked[:15]
    if not top:
        lines.append("_No item reached the score threshold._")
        log.info("Built report: no recommendations for %s", user_id)
        return "\n".join(lines)

    lines.append("## Top Matches")
    lines.append("")
    for s in top:
        r = s.result
        lines.append(f"### {s.item.title} @ {s.item.source_id or '—'}")
        lines.append(f"- **Score:** {r.final_score:.1f} ({score_label(r.final_score)})")
        if r.collaborative_score:
            lines.append(
                f"- **Content / collaborative:** {r.content_score:.1f} / {r.collaborative_score:.2f}"
            )
        if s.item.location:
            lines.append(f"- **Location:** {s.item.location}")
        if r.reasons:
            lines.append(f"- **Why:** {', '.join(r.reasons[:4])}")
        if r.missing_skills:
            lines.append(f"- **Missing skills:** {', '.join(r.missing_skills[:4])}")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("## Quick Reference")
    lines.append("")
    lines.append("| # | Title | Source | Location | Score |")
    lines.append("|--:|-------|--------|----------|------:|")
    for i, s in enumerate(top, 1):
        loc = (s.item.location or "").split(",")[0][:18]
        lines.append(
            f"| {i} | {_clip(s.item.title, 40)} | {_clip(s.item.source_id or '', 22)} "
            f"| {loc} | {s.score:.1f} |"
        )
    lines.append("")

    log.info("Built report: %d items for %s", len(ranked), user_id)
    return "\n".join(lines)


def write_report(content: str, user_id: str) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    path = REPORTS_DIR / f"recommendations_{user_id}_{date}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
