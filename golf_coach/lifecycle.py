import logging
from dataclasses import dataclass
from enum import Enum
from collections import OrderedDict
from typing import Callable, Mapping, Optional, Protocol

from .collector import InputValidationError, collect
from .gemini import AnalysisError
from .prompt import PromptSpec, build_prompt
from .renderer import Renderer
from .schemas import AnalysisResult

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = (
    "Sorry, something went wrong while analyzing your score. Please try again."
)


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


_ALLOWED = {
    Phase.IDLE: {Phase.LOADING, Phase.ERROR},
    Phase.LOADING: {Phase.SUCCESS, Phase.ERROR},
    Phase.SUCCESS: {Phase.IDLE},
    Phase.ERROR: {Phase.IDLE},
}


@dataclass(frozen=True)
class UIState:
    phase: Phase
    result: Optional[AnalysisResult] = None
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "UIState":
        return cls(Phase.IDLE)

    @classmethod
    def loading(cls) -> "UIState":
        return cls(Phase.LOADING)

    @classmethod
    def success(cls, result: AnalysisResult) -> "UIState":
        return cls(Phase.SUCCESS, result=result)

    @classmethod
    def error(cls, message: str) -> "UIState":
        return cls(Phase.ERROR, message=message)

    @property
    def busy(self) -> bool:
        return self.phase is Phase.LOADING

    @property
    def submit_enabled(self) -> bool:
        return not self.busy


class IllegalTransition(RuntimeError):
    """Raised on a UIState change the lifecycle does not allow."""


class SubmissionInProgress(RuntimeError):
    """Raised when a submit arrives while an analysis is still Loading."""


class Analyzer(Protocol):
    async def analyze(self, spec: PromptSpec) -> AnalysisResult: ...


class LifecycleController:
    def __init__(self, client: Analyzer, renderer: Renderer) -> None:
        self._client = client
        self.renderer = renderer
        self._state = UIState.idle()

    @property
    def state(self) -> UIState:
        return self._state

    def _transition(self, new: UIState) -> None:
        old = self._state.phase
        if new.phase not in _ALLOWED[old]:
            raise IllegalTransition(f"{old.value} -> {new.phase.value}")
        logger.debug("UI state %s -> %s", old.value, new.phase.value)
        self._state = new

    async def submit(self, form: Mapping[str, str]) -> UIState:
        # Nothing below awaits before the move to Loading, so this check
        # and the transition cannot interleave with another submit.
        if self._state.busy:
            raise SubmissionInProgress("An analysis is already in progress.")

        if self._state.phase is not Phase.IDLE:
            self._transition(UIState.idle())

        try:
            request = collect(form)
        except InputValidationError as exc:
            self._transition(UIState.error(str(exc)))
            self.renderer.render_error(str(exc))
            return self._state

        self._transition(UIState.loading())
        self.renderer.clear()

        try:
            result = await self._client.analyze(build_prompt(request))
        except AnalysisError as exc:
            logger.error("Error analyzing score: %s", exc, exc_info=exc)
            self._fail()
        except Exception:
            logger.exception("Unexpected error during score analysis")
            self._fail()
        except BaseException:
            # Cancelled mid-call: leave Loading before propagating.
            logger.warning("Score analysis cancelled")
            self._fail()
            raise
        else:
            self._transition(UIState.success(result))
            self.renderer.render_success(result)

        return self._state

    def _fail(self) -> None:
        self._transition(UIState.error(GENERIC_ERROR_MESSAGE))
        self.renderer.render_error(GENERIC_ERROR_MESSAGE)


class ControllerRegistry:
    """One LifecycleController per browser session.

    Once more than ``max_sessions`` are held, the least recently used idle
    controllers are dropped. A controller that is Loading is never dropped.
    """

    def __init__(
        self,
        factory: Callable[[], LifecycleController],
        max_sessions: int = 1000,
    ) -> None:
        self._factory = factory
        self._controllers: "OrderedDict[str, LifecycleController]" = OrderedDict()
        self.max_sessions = max_sessions

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._controllers

    def get(self, session_id: str) -> LifecycleController:
        controller = self._controllers.get(session_id)
        if controller is None:
            controller = self._factory()
            self._controllers[session_id] = controller
            self._evict()
        self._controllers.move_to_end(session_id)
        return controller

    def _evict(self) -> None:
        for session_id in list(self._controllers):
            if len(self._controllers) <= self.max_sessions:
                break
            if not self._controllers[session_id].state.busy:
                del self._controllers[session_id]
