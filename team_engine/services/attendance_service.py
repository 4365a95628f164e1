# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for per-day attendance and the absence rule."""
from typing import Any, Dict, List, Optional

from team_engine.core.config import settings
from team_engine.core.errors import returns_outcome
from team_engine.core.logging import get_logger
from team_engine.metrics import ATTENDANCE_WRITES
from team_engine.models.domain import AttendanceRecord

logger = get_logger(__name__)


class AttendanceService:
    def __init__(self, store, violation_threshold: Optional[int] = None):
        self._store = store
        # More absences than this is a violation; exactly this many is a warning
        self._threshold = (settings.ABSENCE_VIOLATION_THRESHOLD
                           if violation_threshold is None else violation_threshold)

    @returns_outcome
    def set_attendance(self, team_id: str, member_id: str, day: int,
                       present: bool) -> AttendanceRecord:
        record = AttendanceRecord(team_id=team_id, member_id=member_id,
                                  day=day, present=present)
        self._store.upsert_attendance(record)
        ATTENDANCE_WRITES.labels(present=str(present).lower()).inc()
        logger.info("Attendance set team=%s member=%s day=%d present=%s",
                    team_id, member_id, day, present)
        return record

    @returns_outcome
    def get_absence_count(self, team_id: str, member_id: str) -> int:
        return self._absences(team_id).get(member_id, 0)

    @returns_outcome
    def get_violations(self, team_id: str) -> List[str]:
        return sorted(m for m, n in self._absences(team_id).items() if n > self._threshold)

    @returns_outcome
    def get_member_status(self, team_id: str, member_id: str) -> str:
        absences = self._absences(team_id).get(member_id, 0)
        if absences > self._threshold:
            return "violation"
        if absences and absences == self._threshold:
            return "warning"
        return "ok"

    @returns_outcome
    def get_member_attendance_for_day(self, team_id: str, member_id: str,
                                      day: int) -> Optional[bool]:
        """True/False when recorded, None when nothing was recorded for that day."""
        for record in self._store.read_attendance(team_id):
            if record.member_id == member_id and record.day == day:
                return record.present
        return None

    @returns_outcome
    def get_team_attendance(self, team_id: str) -> List[AttendanceRecord]:
        return self._store.read_attendance(team_id)

    @returns_outcome
    def get_summary(self, team_id: str) -> Dict[str, Any]:
        records = self._store.read_attendance(team_id)
        present = sum(1 for r in records if r.present)
        total = len(records)
        return {
            "team_id": team_id,
            "present": present,
            "absent": total - present,
            "total": total,
            "attendance_rate": round(present / total * 100) if total else 0,
            "violations": sorted(m for m, n in self._count(records).items()
                                 if n > self._threshold),
        }

    def _absences(self, team_id: str) -> Dict[str, int]:
        return self._count(self._store.read_attendance(team_id))

    @staticmethod
    def _count(records: List[AttendanceRecord]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in records:
            if not record.present:
                counts[record.member_id] = counts.get(record.member_id, 0) + 1
        return counts
