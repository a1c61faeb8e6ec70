from dataclasses import dataclass, field
from typing import Any, Dict

from .schemas import AnalysisRequest

SYSTEM_INSTRUCTION = """\
You are a friendly and encouraging golf coach for women. Your task is to analyze \
a woman's golf details: average 18-hole score, playing frequency, starting age, \
golf familiarity (1-10), best club, and worst club. Based on all this information, \
determine her skill level. You must provide the level, a brief description, and \
2-3 actionable tips for improvement. The tips must be highly personalized, \
directly referencing her best and worst clubs. For example, give specific drills \
for her worst club and suggest ways to leverage her best club. Adjust the \
complexity of your advice based on her familiarity score. Always respond in a \
supportive and positive tone. Your response must be in JSON format.\
"""

USER_MESSAGE = (
    "My average 18-hole score is {score}, I play {frequency} per month, "
    "I started playing at age {age}, my familiarity with golf is a "
    "{familiarity} out of 10. My best club is {best_club} and my worst club "
    "is {worst_club}."
)

# Gemini responseSchema (OpenAPI subset, upper-case type names)
RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "level": {
            "type": "STRING",
            "description": (
                "The golfer's skill level (e.g., Beginner, High-Handicapper, "
                "Mid-Handicapper, Low-Handicapper, Scratch Golfer, Professional)."
            ),
        },
        "description": {
            "type": "STRING",
            "description": "A brief, encouraging description of this skill level.",
        },
        "tips": {
            "type": "ARRAY",
            "description": (
                "An array of 2-3 actionable, concise tips for improvement tailored "
                "to this level, playing frequency, best club, and worst club."
            ),
            "items": {"type": "STRING"},
        },
    },
    "required": ["level", "description", "tips"],
}


@dataclass(frozen=True)
class PromptSpec:
    system_instruction: str
    user_message: str
    response_schema: Dict[str, Any] = field(default_factory=lambda: RESPONSE_SCHEMA)


def build_prompt(req: AnalysisRequest) -> PromptSpec:
    return PromptSpec(
        system_instruction=SYSTEM_INSTRUCTION,
        user_message=USER_MESSAGE.format(
            score=req.score,
            frequency=req.frequency.value,
            age=req.age,
            familiarity=req.familiarity,
            best_club=req.best_club.value,
            worst_club=req.worst_club.value,
        ),
        response_schema=RESPONSE_SCHEMA,
    )
