from dataclasses import dataclass
from typing import List, Optional, Tuple

from fastapi.templating import Jinja2Templates

from .schemas import AnalysisResult

TIPS_HEADING = "Tips for Your Next Round:"


@dataclass(frozen=True)
class DisplayBlock:
    kind: str  # "result" or "error"
    body: str
    title: Optional[str] = None
    tips: Tuple[str, ...] = ()

    @property
    def css_class(self) -> str:
        return "result-card error" if self.kind == "error" else "result-card"


class Renderer:
    """Owns the output region. It never holds more than one block."""

    def __init__(self, templates: Jinja2Templates) -> None:
        self._templates = templates
        self._blocks: List[DisplayBlock] = []

    @property
    def blocks(self) -> Tuple[DisplayBlock, ...]:
        return tuple(self._blocks)

    def clear(self) -> None:
        self._blocks.clear()

    def render_success(self, result: AnalysisResult) -> DisplayBlock:
        block = DisplayBlock(
            kind="result",
            title=result.level,
            body=result.description,
            tips=tuple(result.tips),
        )
        self._replace(block)
        return block

    def render_error(self, message: str) -> DisplayBlock:
        block = DisplayBlock(kind="error", body=message)
        self._replace(block)
        return block

    def _replace(self, block: DisplayBlock) -> None:
        self.clear()
        self._blocks.append(block)

    def html(self) -> str:
        template = self._templates.get_template("_output.html")
        return template.render(blocks=self._blocks, tips_heading=TIPS_HEADING)
