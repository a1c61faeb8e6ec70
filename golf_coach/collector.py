from typing import Mapping, Optional

from .schemas import AnalysisRequest, Club, Frequency

INVALID_NUMBER_MESSAGE = "Please enter a valid number for your score and age."
INVALID_FAMILIARITY_MESSAGE = "Please rate your familiarity with golf from 1 to 10."
INVALID_SELECTION_MESSAGE = (
    "Please choose your playing frequency and your best and worst clubs from the lists."
)


class InputValidationError(ValueError):
    """Raised when the submitted form fields cannot form an AnalysisRequest."""


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def collect(form: Mapping[str, str]) -> AnalysisRequest:
    """Build an AnalysisRequest from the form values as they are right now."""
    score = _parse_int(form.get("score"))
    age = _parse_int(form.get("age"))
    if score is None or age is None:
        raise InputValidationError(INVALID_NUMBER_MESSAGE)

    familiarity = _parse_int(form.get("familiarity"))
    if familiarity is None or not 1 <= familiarity <= 10:
        raise InputValidationError(INVALID_FAMILIARITY_MESSAGE)

    try:
        frequency = Frequency(form.get("frequency"))
        best_club = Club(form.get("best_club"))
        worst_club = Club(form.get("worst_club"))
    except ValueError as exc:
        raise InputValidationError(INVALID_SELECTION_MESSAGE) from exc

    return AnalysisRequest(
        score=score,
        frequency=frequency,
        age=age,
        familiarity=familiarity,
        best_club=best_club,
        worst_club=worst_club,
    )
