from __future__ import annotations

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from tqdm import tqdm

from src.inputs.video_input import VideoInput
from src.outputs.video_output import VideoOutput
from src.runtime.debug import DebugFlags
from src.runtime.orchestrator import Orchestrator
from src.utils.config import get, load_yaml, set_path
from src.utils.logger import setup_logger


def make_run_dir(base_dir: str | Path) -> Path:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(base_dir) / f"run_{ts}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Real-time video background replacement")
    parser.add_argument("--config", default="configs/system.yaml", help="Path to YAML config")
    parser.add_argument("--input", help="Input video path or camera index (overrides video.input)")
    parser.add_argument("--background", help="Replacement background image (overrides background.image)")
    parser.add_argument("--model", help="Model file, .tflite or .onnx (overrides model.path)")
    parser.add_argument("--family", help="deeplabv3 | bodypix_resnet | bodypix_mobilenet (overrides model.family)")
    parser.add_argument("--threads", type=int, help="Inference threads (overrides model.threads)")
    parser.add_argument("--delegate", help="Hardware delegate name or library (overrides model.delegate)")
    parser.add_argument("--max-frames", type=int, help="Stop after this many frames")
    parser.add_argument(
        "--debug",
        help="Comma-separated: show_output_frame,show_model_input_frame,show_model_output",
    )
    return parser


def apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    set_path(cfg, "video.input", args.input)
    set_path(cfg, "background.image", args.background)
    set_path(cfg, "model.path", args.model)
    set_path(cfg, "model.family", args.family)
    set_path(cfg, "model.threads", args.threads)
    set_path(cfg, "model.delegate", args.delegate)
    set_path(cfg, "video.max_frames", args.max_frames)
    return cfg


def summarize(frames: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not frames:
        return {"frames": 0}
    stage_names = sorted({name for f in frames for name in f["stages_ms"]})
    return {
        "frames": len(frames),
        "avg_fps": sum(f["fps"] for f in frames) / len(frames),
        "avg_stage_ms": {
            name: sum(f["stages_ms"].get(name, 0.0) for f in frames) / len(frames) for name in stage_names
        },
        "avg_background_ratio": sum(f["background_ratio"] or 0.0 for f in frames) / len(frames),
    }


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    cfg: Dict[str, Any] = apply_overrides(load_yaml(args.config), args)

    output_base = get(cfg, "runtime.output_dir", "results")
    run_dir = make_run_dir(output_base)
    logger = setup_logger(log_dir=run_dir, level=get(cfg, "runtime.log_level", "INFO"))

    console = Console()
    console.print(f"[bold]bgr[/bold] run dir: {run_dir}")

    source = get(cfg, "video.input")
    if source is None:
        raise SystemExit("No input: pass --input or set video.input")
    vin = VideoInput(source, max_frames=get(cfg, "video.max_frames"))
    logger.info("Input: %s", vin.describe())

    debug_flags = DebugFlags.parse(args.debug) if args.debug is not None else DebugFlags.from_config(cfg)
    orchestrator = Orchestrator(cfg, logger, debug_flags=debug_flags)

    save_video = bool(get(cfg, "runtime.save_video", True))
    save_metrics = bool(get(cfg, "runtime.save_metrics", True))
    out_video_path = run_dir / "output.mp4"
    writer = VideoOutput(out_video_path, fps=vin.meta.fps if vin.meta else 30.0) if save_video else None

    frames: List[Dict[str, Any]] = []
    try:
        for frame_id, packet in tqdm(vin.frames(), total=vin.total_frames, desc="Processing"):
            result = orchestrator.process_frame(frame_id, packet.frame)
            if writer is not None:
                writer.write(result.frame)
            if save_metrics:
                frames.append(
                    {
                        "frame_id": frame_id,
                        "fps": result.fps,
                        "stages_ms": result.stages_ms,
                        "background_ratio": result.background_ratio,
                        "warnings": result.warnings,
                    }
                )
            if orchestrator.stop_requested:
                break
    finally:
        vin.stop()
        if writer is not None:
            writer.release()
        orchestrator.close()

    if save_metrics:
        metrics = {
            "model": cfg.get("model", {}),
            "input": {"source": vin.describe(), "meta": vin.meta.__dict__ if vin.meta else {}},
            "summary": summarize(frames),
            "frames": frames,
        }
        metrics_path = run_dir / "metrics.json"
        metrics_path.write_text(json.dumps(metrics, indent=2, default=str), encoding="utf-8")
        logger.info("Saved metrics: %s", metrics_path)

    logger.info("Done.")


if __name__ == "__main__":
    main()
