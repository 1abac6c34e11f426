import time

from src.app import apply_overrides, build_parser, summarize
from src.runtime.health_monitor import HealthMonitor
from src.utils.timing import FPSMeter, StageTimer


def test_health_monitor_counts_misses():
    monitor = HealthMonitor({"watchdog_ms": 50})
    assert monitor.check_latency(10.0)
    assert not monitor.check_latency(80.0)
    assert not monitor.check_latency(90.0)
    assert monitor.consecutive_misses == 2
    assert monitor.check_latency(None)
    assert monitor.check_latency(20.0)
    assert monitor.consecutive_misses == 0
    assert monitor.misses == 2


def test_health_monitor_disabled_without_budget():
    assert HealthMonitor({}).check_latency(1e6)


def test_stage_timer_records_stages():
    timer = StageTimer()
    with timer.stage("sleep"):
        time.sleep(0.001)
    assert timer.stages_ms["sleep"] > 0
    assert timer.total_ms >= timer.stages_ms["sleep"]


def test_fps_meter_positive():
    meter = FPSMeter()
    time.sleep(0.001)
    assert meter.tick() > 0


def test_cli_overrides_config():
    args = build_parser().parse_args(["--input", "clip.mp4", "--family", "bodypix_resnet", "--threads", "2"])
    cfg = apply_overrides({"model": {"family": "deeplabv3", "threads": 4, "path": "m.tflite"}}, args)
    assert cfg["video"]["input"] == "clip.mp4"
    assert cfg["model"] == {"family": "bodypix_resnet", "threads": 2, "path": "m.tflite"}


def test_summary_averages_frames():
    frames = [
        {"fps": 10.0, "stages_ms": {"inference": 4.0}, "background_ratio": 0.5},
        {"fps": 20.0, "stages_ms": {"inference": 6.0, "decode": 2.0}, "background_ratio": None},
    ]
    summary = summarize(frames)
    assert summary["frames"] == 2
    assert summary["avg_fps"] == 15.0
    assert summary["avg_stage_ms"] == {"decode": 1.0, "inference": 5.0}
    assert summary["avg_background_ratio"] == 0.25
    assert summarize([]) == {"frames": 0}
