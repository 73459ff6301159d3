"""Class and officer statistics computed from stored records.

Every figure is recomputed from the store on each call. Missing data turns
into zero or empty results; store failures propagate to the caller.
"""
from __future__ import annotations

import asyncio
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from .store import (
    ASSESSMENTS,
    COURSES,
    ENROLLMENTS,
    MARKS,
    MEDICAL,
    OFFICERS,
    TRAITS,
    WARNINGS,
    Document,
    RecordStore,
)

PASS_PERCENTAGE = 50
TOP_TRAITS_LIMIT = 5


class OfficerNotFound(LookupError):
    pass


def round2(value: float) -> float:
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class StatisticsEngine:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def _query(self, collection: str, where: Optional[Dict[str, Any]] = None) -> List[Document]:
        return await asyncio.to_thread(self.store.query, collection, where)

    async def _get(self, collection: str, doc_id: str) -> Optional[Document]:
        return await asyncio.to_thread(self.store.get, collection, doc_id)

    async def _enrolled_officer_ids(self, class_id: str) -> List[str]:
        enrollments = await self._query(ENROLLMENTS, {"classId": class_id})
        return [e.get("officerId") for e in enrollments]

    # ---- class level ----

    async def class_average(self, class_id: str) -> float:
        """Average of the raw mark totals of the officers enrolled in a class.

        Marks are summed as stored, not normalised by assessment totals. If any
        enrolled officer has no marks at all the class average is 0.
        """
        officer_ids = await self._enrolled_officer_ids(class_id)
        if not officer_ids:
            return 0.0
        class_total = 0.0
        for officer_id in officer_ids:
            marks = await self._query(MARKS, {"officerId": officer_id})
            if not marks:
                return 0.0
            class_total += sum(_number(m.get("marks")) for m in marks)
        return round2(class_total / len(officer_ids))

    async def officer_count(self, class_id: str) -> int:
        return len(await self._query(ENROLLMENTS, {"classId": class_id}))

    async def _optional_course_results(self, class_id: str) -> Dict[str, Dict[str, Any]]:
        # course id -> {"name": courseName, "failed": [officer ids]}
        results: Dict[str, Dict[str, Any]] = {}
        for course in await self._query(COURSES, {"type": "Optional"}):
            totals: Dict[str, Dict[str, float]] = defaultdict(lambda: {"obtained": 0.0, "total": 0.0})
            for assessment in await self._query(ASSESSMENTS, {"courseId": course.id}):
                ceiling = _number(assessment.get("totalMarks"))
                for mark in await self._query(MARKS, {"assessmentId": assessment.id}):
                    officer_id = mark.get("officerId")
                    totals[officer_id]["obtained"] += _number(mark.get("marks"))
                    totals[officer_id]["total"] += ceiling
            failed = [
                officer_id
                for officer_id, perf in totals.items()
                # a zero ceiling has no meaningful percentage and never fails
                if perf["total"] > 0 and perf["obtained"] / perf["total"] * 100 < PASS_PERCENTAGE
            ]
            results[course.id] = {"name": course.get("courseName"), "failed": failed}
        return results

    async def failed_optional_courses(self, class_id: str) -> Dict[str, List[str]]:
        """Optional course id -> ids of officers scoring below 50%.

        Every mark recorded against the course counts, whether or not its officer
        is enrolled in ``class_id``.
        """
        results = await self._optional_course_results(class_id)
        return {course_id: r["failed"] for course_id, r in results.items()}

    async def failed_officer_counts(self, class_id: str) -> Dict[str, int]:
        """Optional course name -> number of failing officers."""
        results = await self._optional_course_results(class_id)
        return {r["name"]: len(r["failed"]) for r in results.values()}

    async def failed_officers_details(self, class_id: str) -> Dict[str, List[Dict[str, Any]]]:
        failed = await self.failed_optional_courses(class_id)
        details: Dict[str, List[Dict[str, Any]]] = {}
        for course_id, officer_ids in failed.items():
            docs = await asyncio.gather(*(self._get(OFFICERS, oid) for oid in officer_ids))
            details[course_id] = [d.to_dict() for d in docs if d is not None]
        return details

    async def failed_compulsory_courses(self, class_id: str) -> Dict[str, List[Dict[str, Any]]]:
        """Compulsory course id -> officers whose tokens include F but never P."""
        failed: Dict[str, List[Dict[str, Any]]] = {}
        seen: Dict[str, set] = defaultdict(set)
        for officer_id in await self._enrolled_officer_ids(class_id):
            officer = await self._get(OFFICERS, officer_id)
            if officer is None:
                continue
            for course in officer.get("compulsoryCourses") or []:
                tokens = course.get("marksArray") or []
                if "F" not in tokens or "P" in tokens:
                    continue
                course_id = course.get("courseId")
                # an officer enrolled twice in the class is still listed once
                if officer.id in seen[course_id]:
                    continue
                seen[course_id].add(officer.id)
                failed.setdefault(course_id, []).append(officer.to_dict())
        return failed

    async def pet_aggregate(self, class_id: str) -> Dict[str, float]:
        total_pet = 0.0
        obtained_pet = 0.0
        for officer_id in await self._enrolled_officer_ids(class_id):
            officer = await self._get(OFFICERS, officer_id)
            pet = officer.get("pet") if officer else None
            if pet:
                total_pet += _number(pet.get("totalMarks"))
                obtained_pet += _number(pet.get("obtainedMarks"))
        return {"totalPetMarks": total_pet, "obtainedPetMarks": obtained_pet}

    async def class_statistics(self, class_id: str) -> Dict[str, Any]:
        average, officers, failed, pet = await asyncio.gather(
            self.class_average(class_id),
            self.officer_count(class_id),
            self.failed_officer_counts(class_id),
            self.pet_aggregate(class_id),
        )
        return {
            "averageMarks": average,
            "totalOfficers": officers,
            "failedByCourseName": failed,
            "totalPetMarks": pet["totalPetMarks"],
            "obtainedPetMarks": pet["obtainedPetMarks"],
        }

    # ---- officer level ----

    async def officer_details(self, officer_id: str) -> Dict[str, Any]:
        officer = await self._get(OFFICERS, officer_id)
        if officer is None:
            raise OfficerNotFound(officer_id)
        return officer.to_dict()

    async def officer_average_marks(self, officer_id: str) -> float:
        """Percentage of obtainable marks the officer achieved across assessments."""
        marks = await self._query(MARKS, {"officerId": officer_id})
        if not marks:
            return 0.0
        obtained = 0.0
        obtainable = 0.0
        for mark in marks:
            assessment = await self._get(ASSESSMENTS, mark.get("assessmentId"))
            if assessment is None:
                continue
            obtainable += _number(assessment.get("totalMarks"))
            obtained += _number(mark.get("marks"))
        if obtainable == 0:
            return 0.0
        return round2(obtained / obtainable * 100)

    async def top_traits(self, officer_id: str, limit: int = TOP_TRAITS_LIMIT) -> List[Dict[str, Any]]:
        # No ranking: the first traits the store returns
        traits = await self._query(TRAITS, {"officerId": officer_id})
        return [t.data for t in traits[:limit]]

    async def disciplinary_summary(self, officer_id: str) -> Dict[str, List[str]]:
        summary: Dict[str, List[str]] = {"green-slip": [], "red-slip": []}
        for warning in await self._query(WARNINGS, {"officerId": officer_id}):
            if warning.get("type") != "observations":
                continue
            punishment = str(warning.get("punishment") or "").lower()
            if "green slip" in punishment:
                summary["green-slip"].append(warning.get("offense"))
            elif "red slip" in punishment:
                summary["red-slip"].append(warning.get("offense"))
        return summary

    async def sick_event_count(self, officer_id: str) -> int:
        return len(await self._query(MEDICAL, {"officerId": officer_id}))

    async def officer_statistics(self, officer_id: str) -> Dict[str, Any]:
        details, average, traits, warnings, sick = await asyncio.gather(
            self.officer_details(officer_id),
            self.officer_average_marks(officer_id),
            self.top_traits(officer_id),
            self.disciplinary_summary(officer_id),
            self.sick_event_count(officer_id),
        )
        return {
            "officer": details,
            "averageMarks": average,
            "traits": traits,
            "warnings": warnings,
            "sickEvents": sick,
        }
