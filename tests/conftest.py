import asyncio
from types import SimpleNamespace

import numpy as np
import pytest


def record(cx, cy, w, h, conf, class_index, num_classes=4):
    scores = [0.0] * num_classes
    scores[class_index] = 1.0
    return [cx, cy, w, h, conf] + scores


def yolo_output(records):
    return np.array([records], dtype=np.float32)


class FakeOrtSession:
    """Stands in for an onnxruntime session."""

    def __init__(self, outputs=None, input_name="images", delays=None, error=None):
        self.outputs = outputs
        self.input_name = input_name
        self.delays = list(delays or [])
        self.error = error
        self.feeds = []
        self.released = False

    def get_inputs(self):
        return [SimpleNamespace(name=self.input_name)]

    async def run(self, output_names, feeds):
        self.feeds.append(feeds)
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        if self.error:
            raise self.error
        return [self.outputs]

    def release(self):
        self.released = True


class CountingLoader:
    """Loader that records calls and hands out a fixed session."""

    def __init__(self, session, fail_times=0):
        self.session = session
        self.fail_times = fail_times
        self.calls = []

    async def __call__(self, model_path, providers, graph_optimization_level):
        self.calls.append((model_path, tuple(providers), graph_optimization_level))
        await asyncio.sleep(0)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("model file missing")
        return self.session


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def make_output():
    return yolo_output


@pytest.fixture
def fake_session():
    return FakeOrtSession


@pytest.fixture
def counting_loader():
    return CountingLoader


@pytest.fixture
def uniform_frame():
    def _frame(h, w, rgba=(200, 200, 200, 255)):
        frame = np.zeros((h, w, 4), dtype=np.uint8)
        frame[:, :] = rgba
        return frame
    return _frame
