import logging

import numpy as np

from conftest import class_scores
from src.compositing.background import BackgroundSelector
from src.runtime.background_remover import BackgroundRemover
from src.runtime.debug import DebugFlags
from src.runtime.orchestrator import Orchestrator


def make_orchestrator(engine, cfg=None):
    cfg = cfg or {"runtime": {"watchdog_ms": 0}}
    remover = BackgroundRemover(None, "deeplabv3", engine=engine)
    background = BackgroundSelector(color=(0, 0, 255))  # RGB blue
    return Orchestrator(cfg, logging.getLogger("test"), remover=remover, background=background, debug_flags=DebugFlags())


def test_frame_comes_back_bgr_with_background(make_engine):
    orch = make_orchestrator(make_engine(output=class_scores(16, 16, winner=0)))
    frame = np.full((12, 20, 3), 77, dtype=np.uint8)

    result = orch.process_frame(1, frame)

    assert result.frame.shape == (12, 20, 3)
    assert np.all(result.frame == (255, 0, 0))  # BGR blue
    assert result.background_ratio == 1.0
    assert {"convert", "preprocess", "inference", "decode", "composite"} <= set(result.stages_ms)
    assert result.warnings == []


def test_person_frame_is_unchanged(make_engine, rng):
    orch = make_orchestrator(make_engine(output=class_scores(16, 16, winner=15)))
    frame = rng.integers(0, 256, size=(12, 20, 3), dtype=np.uint8)
    result = orch.process_frame(1, frame.copy())
    assert np.array_equal(result.frame, frame)
    assert result.background_ratio == 0.0


def test_resize_applies_before_processing(make_engine):
    cfg = {"video": {"resize": {"enabled": True, "width": 32, "height": 24}}}
    orch = make_orchestrator(make_engine(), cfg)
    result = orch.process_frame(1, np.zeros((10, 10, 3), dtype=np.uint8))
    assert result.frame.shape == (24, 32, 3)


def test_hud_draws_on_output(make_engine):
    cfg = {"runtime": {"overlay": {"enabled": True}}}
    orch = make_orchestrator(make_engine(output=class_scores(16, 16, winner=15)), cfg)
    frame = np.zeros((120, 320, 3), dtype=np.uint8)
    result = orch.process_frame(1, frame)
    assert result.frame.any()


def test_close_releases_engine(make_engine):
    engine = make_engine()
    orch = make_orchestrator(engine)
    orch.close()
    assert engine.released
