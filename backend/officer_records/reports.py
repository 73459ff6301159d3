from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .llm_client import TextGenerationError
from .stats_engine import round2


NO_DATA = "No data available to generate summary."
NO_SUMMARY = "No summary generated."

CLASS_SUMMARY_MAX_TOKENS = 500
OFFICER_SUMMARY_MAX_TOKENS = 800


class TextGenerator(Protocol):
    async def generate(self, prompt: str, *, max_tokens: int) -> str: ...


def format_traits(traits: List[Dict[str, Any]]) -> str:
    parts = []
    for trait in traits:
        total = float(trait.get("total") or 0)
        ratio = float(trait.get("score") or 0) / total if total else 0
        parts.append(f"{trait.get('traitName')}: Score {round2(ratio)}")
    return "; ".join(parts)


def format_disciplinary(summary: Dict[str, List[str]]) -> str:
    green = ", ".join(str(o) for o in summary.get("green-slip", [])) or "None"
    red = ", ".join(str(o) for o in summary.get("red-slip", [])) or "None"
    return f"Green Slips: {green}; Red Slips: {red}"


def format_failed_courses(failed: Dict[str, int]) -> str:
    if not failed:
        return "None"
    return ", ".join(f"{name}: {count} failed" for name, count in failed.items())


def build_class_prompt(stats: Dict[str, Any]) -> str:
    return (
        "You are an instructor's assistant writing a short report on a training class.\n"
        "Summarize the class using the figures below.\n\n"
        f"Average marks: {stats['averageMarks']}\n"
        f"Total officers: {stats['totalOfficers']}\n"
        f"Failed officers by course: {format_failed_courses(stats.get('failedByCourseName') or {})}\n"
        f"PET marks: {stats['obtainedPetMarks']} obtained out of {stats['totalPetMarks']}\n\n"
        "Write the report as bulleted points under these headings:\n"
        "- Overall Performance\n"
        "- Weak Areas\n"
        "- Recommendations for Improvement\n"
        "- Special Notes\n"
        "Keep it concise and in plain language. Do not use exam or grading jargon."
    )


def build_officer_prompt(stats: Dict[str, Any]) -> str:
    officer = stats.get("officer") or {}
    return (
        "You are an instructor's assistant writing a performance report on one trainee.\n"
        "Always refer to the trainee as a sailor, never as an officer.\n\n"
        f"Name: {officer.get('name', 'Unknown')}\n"
        f"Father's name: {officer.get('fatherName', 'Unknown')}\n"
        f"Average marks: {stats['averageMarks']}%\n"
        f"Top traits: {format_traits(stats.get('traits') or [])}\n"
        f"Disciplinary record: {format_disciplinary(stats.get('warnings') or {})}\n"
        f"Times reported sick: {stats.get('sickEvents', 0)}\n\n"
        "Context:\n"
        "- A green slip is a minor disciplinary note for small lapses.\n"
        "- A red slip is a serious disciplinary note.\n"
        "- A medical status of ML means the sailor was placed on medical leave.\n\n"
        "Write the report as bulleted points under these headings:\n"
        "- Academic Performance\n"
        "- Strengths\n"
        "- Discipline\n"
        "- Health\n"
        "- Recommendations\n"
        "Keep it concise and in plain language. Do not use exam or grading jargon."
    )


class ReportAssembler:
    """Turns precomputed statistics into a generated prose summary.

    Empty statistics short-circuit to ``NO_DATA`` without contacting the
    generator. Generator errors propagate unchanged.
    """

    def __init__(self, client: Optional[TextGenerator]) -> None:
        self.client = client

    async def _generate(self, prompt: str, max_tokens: int) -> str:
        if self.client is None:
            raise TextGenerationError("Text generation is not configured")
        text = await self.client.generate(prompt, max_tokens=max_tokens)
        if not text or not text.strip():
            return NO_SUMMARY
        return text

    async def class_summary(self, stats: Dict[str, Any]) -> str:
        if (
            stats["averageMarks"] == 0
            or stats["totalPetMarks"] == 0
            or stats["obtainedPetMarks"] == 0
            or stats["totalOfficers"] == 0
        ):
            return NO_DATA
        return await self._generate(build_class_prompt(stats), CLASS_SUMMARY_MAX_TOKENS)

    async def officer_summary(self, stats: Dict[str, Any]) -> str:
        if stats["averageMarks"] == 0 or not stats.get("traits"):
            return NO_DATA
        return await self._generate(build_officer_prompt(stats), OFFICER_SUMMARY_MAX_TOKENS)
