import asyncio

import numpy as np

from wall_scanner.catalog import ElementType
from wall_scanner.config import ScannerConfig
from wall_scanner.element_detector import ElementDetector
from wall_scanner.inference import InferenceSession


def detector_for(session, loader_factory):
    return ElementDetector(InferenceSession(loader=loader_factory(session)))


def test_detects_on_model_sized_frame(fake_session, counting_loader, make_output, make_record, uniform_frame):
    session = fake_session(make_output([
        make_record(320, 320, 64, 64, 0.9, 3),
        make_record(100, 100, 20, 30, 0.4, 0),
    ]))
    detector = detector_for(session, counting_loader)

    elements = asyncio.run(detector.detect(uniform_frame(640, 640)))

    assert [el.type for el in elements] == [ElementType.DOOR]
    assert session.feeds[0]["images"].shape == (1, 3, 640, 640)


def test_resizes_camera_frame(fake_session, counting_loader, make_output, make_record, uniform_frame):
    session = fake_session(make_output([make_record(320, 320, 64, 64, 0.9, 0)]))
    detector = detector_for(session, counting_loader)

    elements = asyncio.run(detector.detect(uniform_frame(720, 1280)))

    assert len(elements) == 1
    assert session.feeds[0]["images"].shape == (1, 3, 640, 640)


def test_missing_frame_skips_inference(fake_session, counting_loader):
    session = fake_session()
    detector = detector_for(session, counting_loader)
    assert asyncio.run(detector.detect(None)) == []
    assert session.feeds == []


def test_inference_failure_is_empty(fake_session, counting_loader, uniform_frame):
    session = fake_session(error=RuntimeError("kernel crashed"))
    detector = detector_for(session, counting_loader)
    assert asyncio.run(detector.detect(uniform_frame(640, 640))) == []


def test_load_failure_is_empty(fake_session, counting_loader, uniform_frame):
    detector = ElementDetector(InferenceSession(loader=counting_loader(fake_session(), fail_times=5)))
    assert asyncio.run(detector.detect(uniform_frame(64, 64))) == []


def test_malformed_output_is_empty(fake_session, counting_loader, uniform_frame):
    session = fake_session(np.zeros((1, 4), dtype=np.float32))
    detector = detector_for(session, counting_loader)
    assert asyncio.run(detector.detect(uniform_frame(640, 640))) == []


def test_stale_result_is_discarded(fake_session, counting_loader, make_output, make_record, uniform_frame):
    session = fake_session(make_output([make_record(320, 320, 64, 64, 0.9, 1)]), delays=[0.05, 0.0])
    detector = detector_for(session, counting_loader)
    frame = uniform_frame(640, 640)

    async def scenario():
        return await asyncio.gather(detector.detect_latest(frame), detector.detect_latest(frame))

    older, newer = asyncio.run(scenario())

    assert older is None
    assert [el.type for el in newer] == [ElementType.SWITCH]


def test_from_config_uses_thresholds(fake_session, counting_loader, make_output, make_record, uniform_frame):
    config = ScannerConfig(input_size=320, conf_threshold=0.8, iou_threshold=0.2)
    session = fake_session(make_output([
        make_record(160, 160, 32, 32, 0.85, 2),
        make_record(100, 100, 32, 32, 0.75, 2),
    ]))
    detector = ElementDetector.from_config(config, loader=counting_loader(session))

    elements = asyncio.run(detector.detect(uniform_frame(320, 320)))

    assert len(elements) == 1
    assert elements[0].x == (160 - 16) / 320
    assert session.feeds[0]["images"].shape == (1, 3, 320, 320)


def test_close_releases_session(fake_session, counting_loader, uniform_frame):
    session = fake_session(np.zeros((1, 0, 9), dtype=np.float32))
    detector = detector_for(session, counting_loader)

    async def scenario():
        await detector.detect(uniform_frame(640, 640))
        await detector.close()

    asyncio.run(scenario())
    assert session.released
