from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List

from assessment_engine.learning.models import AssessmentState, SkillLevelRecord, Variant

logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Persist each student's ladder position and recorded skill levels.

    This is the reference implementation of the profile-store collaborator. Every
    student is stored as a separate JSON file, and writes for the same student are
    serialized through a per-student lock so two devices submitting at once cannot
    interleave a read-modify-write.

    Profile Storage Format
    ----------------------
    Profiles are stored as JSON files in the format: `{student_id}.json`

    Example: `data/profiles/student123.json`
    ```json
    {
      "student_id": "student123",
      "assessment_state": {"level": 3, "variant": "B"},
      "skill_levels": {"Grammar": 3},
      "skill_history": [
        {"student_id": "student123", "skill": "Grammar", "level": 3,
         "recorded_at": "2026-03-02T10:15:00"}
      ]
    }
    ```

    Attributes
    ----------
    base_dir : Path
        Directory where profile JSON files are stored. Created if it doesn't
        exist during initialization.

    Examples
    --------
    >>> tracker = ProgressTracker(Path("data/profiles"))
    >>> state = tracker.load_state("student123", default_level=2)
    >>> state
    AssessmentState(level=2, variant=<Variant.A: 'A'>)
    >>> tracker.save_state("student123", AssessmentState(level=2, variant=Variant.B))
    >>> tracker.record_skill_level("student123", "Grammar", 2)
    """

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def profile_path(self, student_id: str) -> Path:
        """Return the JSON file path for a given student ID."""
        return self.base_dir / f"{student_id}.json"

    def lock_for(self, student_id: str) -> threading.Lock:
        """Return the lock that serializes writes for one student."""
        with self._locks_guard:
            return self._locks.setdefault(student_id, threading.Lock())

    def _read(self, student_id: str) -> Dict[str, Any]:
        path = self.profile_path(student_id)
        if not path.exists():
            return {"student_id": student_id}
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write(self, student_id: str, data: Dict[str, Any]) -> None:
        path = self.profile_path(student_id)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        tmp_path.replace(path)

    def load_state(self, student_id: str, default_level: int = 1) -> AssessmentState:
        """
        Load the student's ladder position or start at variant A of `default_level`.

        Raises
        ------
        json.JSONDecodeError
            If the profile file exists but contains invalid JSON.
        """
        stored = self._read(student_id).get("assessment_state")
        if not stored:
            return AssessmentState(level=default_level, variant=Variant.A)
        return AssessmentState.model_validate(stored)

    def save_state(self, student_id: str, state: AssessmentState) -> None:
        """Supersede the stored ladder position with `state`."""
        with self.lock_for(student_id):
            data = self._read(student_id)
            data["assessment_state"] = state.model_dump(mode="json")
            self._write(student_id, data)
        logger.debug("Saved state for %s: level %d variant %s", student_id, state.level, state.variant.value)

    def record_skill_level(self, student_id: str, skill: str, level: int) -> SkillLevelRecord:
        """Record that a student reached `level` in `skill`, keeping the history."""
        record = SkillLevelRecord(student_id=student_id, skill=skill, level=level)
        with self.lock_for(student_id):
            data = self._read(student_id)
            data.setdefault("skill_levels", {})[skill] = level
            data.setdefault("skill_history", []).append(record.model_dump(mode="json"))
            self._write(student_id, data)
        logger.info("Recorded %s level %d for %s", skill, level, student_id)
        return record

    def skill_levels(self, student_id: str) -> Dict[str, int]:
        return dict(self._read(student_id).get("skill_levels", {}))

    def skill_history(self, student_id: str) -> List[SkillLevelRecord]:
        return [
            SkillLevelRecord.model_validate(item)
            for item in self._read(student_id).get("skill_history", [])
        ]
