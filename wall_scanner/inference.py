"""
Inference Session Module
========================
Owns the detection model session with an explicit lifecycle:
UNINITIALIZED -> LOADING -> READY -> RELEASED.

Concurrent load requests share the single in-flight load, so the model
is never created twice. The engine itself is pluggable; the default
loader builds an onnxruntime session.
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Callable, Optional, Sequence
import logging

import onnxruntime as ort

from .errors import ModelLoadError, SessionStateError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


GRAPH_OPTIMIZATION_LEVELS = {
    'disabled': ort.GraphOptimizationLevel.ORT_DISABLE_ALL,
    'basic': ort.GraphOptimizationLevel.ORT_ENABLE_BASIC,
    'extended': ort.GraphOptimizationLevel.ORT_ENABLE_EXTENDED,
    'all': ort.GraphOptimizationLevel.ORT_ENABLE_ALL,
}

# Output names tried in order before falling back to the first output
PREFERRED_OUTPUTS = ('output0', 'output')


class SessionState(Enum):
    """Lifecycle states of an inference session."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    RELEASED = "released"


def onnxruntime_loader(
    model_path: str,
    providers: Sequence[str] = ("CPUExecutionProvider",),
    graph_optimization_level: str = "all"
) -> ort.InferenceSession:
    """Create an onnxruntime session, keeping only providers this build supports."""
    available = ort.get_available_providers()
    selected = [p for p in providers if p in available] or ['CPUExecutionProvider']

    options = ort.SessionOptions()
    options.graph_optimization_level = GRAPH_OPTIMIZATION_LEVELS.get(
        graph_optimization_level, ort.GraphOptimizationLevel.ORT_ENABLE_ALL
    )

    return ort.InferenceSession(model_path, sess_options=options, providers=selected)


def select_output(outputs: Any) -> Any:
    """
    Pick the detection tensor from a session result.

    Accepts a mapping of output names to arrays or a list of arrays.
    """
    if outputs is None:
        return None

    if isinstance(outputs, dict):
        for name in PREFERRED_OUTPUTS:
            if name in outputs:
                return outputs[name]
        return next(iter(outputs.values()), None)

    if isinstance(outputs, (list, tuple)):
        return outputs[0] if outputs else None

    return outputs


class InferenceSession:
    """
    Injectable handle around a model session.
    """

    def __init__(
        self,
        model_path: str = "models/yolo-elements.onnx",
        loader: Optional[Callable[..., Any]] = None,
        providers: Sequence[str] = ("CPUExecutionProvider",),
        graph_optimization_level: str = "all",
        input_name: str = "images"
    ):
        """
        Args:
            model_path: Model artifact path or URL
            loader: Callable(model_path, providers, graph_optimization_level)
                returning a session (or an awaitable of one)
            providers: Execution providers, in preference order
            graph_optimization_level: disabled | basic | extended | all
            input_name: Feed name used when the session does not report one
        """
        self.model_path = model_path
        self.loader = loader or onnxruntime_loader
        self.providers = tuple(providers)
        self.graph_optimization_level = graph_optimization_level
        self.input_name = input_name

        self.state = SessionState.UNINITIALIZED
        self._session = None
        self._load_task: Optional[asyncio.Future] = None

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    async def _load(self):
        logger.info(f"Loading detection model from: {self.model_path}")
        try:
            session = self.loader(self.model_path, self.providers, self.graph_optimization_level)
            if inspect.isawaitable(session):
                session = await session
        except Exception as e:
            self.state = SessionState.UNINITIALIZED
            self._session = None
            logger.error(f"Failed to load detection model: {e}")
            raise ModelLoadError(self.model_path, e) from e
        finally:
            self._load_task = None

        self._session = session
        self.state = SessionState.READY
        logger.info("Detection model loaded successfully")
        return session

    async def load(self):
        """
        Load the model once; concurrent callers await the same load.

        A released session is loaded again. Load failures put the handle
        back to UNINITIALIZED and raise ModelLoadError.
        """
        if self.state is SessionState.READY:
            return self._session

        if self._load_task is None:
            self.state = SessionState.LOADING
            self._load_task = asyncio.ensure_future(self._load())

        return await asyncio.shield(self._load_task)

    def _feed_name(self) -> str:
        get_inputs = getattr(self._session, 'get_inputs', None)
        if callable(get_inputs):
            inputs = get_inputs()
            if inputs:
                return inputs[0].name
        return self.input_name

    async def run(self, tensor) -> Any:
        """
        Run the model on an input tensor, loading it first if needed.

        Returns:
            Raw session outputs (list or mapping of arrays)
        """
        await self.load()
        if self.state is not SessionState.READY:
            raise SessionStateError(f"Session is {self.state.value}, cannot run")

        # onnxruntime runs synchronously on the event loop thread; scan timers
        # pause until it returns. Moving this to an executor would need a lock
        # around load/release and a request token on every result.
        outputs = self._session.run(None, {self._feed_name(): tensor})
        if inspect.isawaitable(outputs):
            outputs = await outputs
        return outputs

    async def release(self) -> None:
        """Free the session. Waits for an in-flight load to settle first."""
        if self._load_task is not None:
            try:
                await asyncio.shield(self._load_task)
            except ModelLoadError:
                pass

        if self._session is not None:
            closer = getattr(self._session, 'release', None)
            if callable(closer):
                result = closer()
                if inspect.isawaitable(result):
                    await result
            logger.info("Detection model released")

        self._session = None
        self.state = SessionState.RELEASED
