# app/services/completion.py
from typing import Any, Mapping

from app.core.config import settings

# wizard sections and their nominal field counts
WIZARD_SECTIONS = (
    ("minor", "Minor Information", 25),
    ("guardian", "Guardian Information", 15),
    ("parent1", "Parent 1", 20),
    ("parent2", "Parent 2", 20),
    ("sijs", "SIJS Factors", 10),
    ("court", "Court Info", 5),
)


def is_answered(value: Any) -> bool:
    return value is not None and value != "" and value != "null"


def estimate(form_data: Mapping[str, Any], total_expected: int = None) -> int:
    """
    Completion percentage (0-100) for a form-data record.

    A progress heuristic, not validation: answered fields over a fixed
    expected inventory, independent of which keys are present.
    """
    if not form_data:
        return 0
    total = total_expected or settings.TOTAL_EXPECTED_FIELDS
    answered = sum(1 for value in form_data.values() if is_answered(value))
    # half up
    return min(100, int(100 * answered / total + 0.5))


def status_label(percentage: int, status: str) -> str:
    if status == "generated":
        return "Generated"
    if status == "ready" or percentage == 100:
        return "Ready"
    if percentage > 70:
        return "In Progress"
    if percentage > 30:
        return "Partial"
    return "Started"
