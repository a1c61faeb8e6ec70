import os
from dataclasses import dataclass

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str
    gemini_model: str = DEFAULT_MODEL
    gemini_base_url: str = DEFAULT_BASE_URL
    log_level: str = "INFO"
    max_sessions: int = 1000

    def __repr__(self) -> str:
        # Keep the API key out of logs and tracebacks.
        return (
            f"Settings(gemini_model={self.gemini_model!r}, "
            f"gemini_base_url={self.gemini_base_url!r}, "
            f"log_level={self.log_level!r}, "
            f"max_sessions={self.max_sessions!r})"
        )


def load_settings() -> Settings:
    """Read settings from the environment. Raises if the API key is missing."""
    api_key = os.getenv("GEMINI_API_KEY", "").strip()
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY environment variable is required.")

    return Settings(
        gemini_api_key=api_key,
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        max_sessions=int(os.getenv("MAX_SESSIONS", "1000")),
    )
