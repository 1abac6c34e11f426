#!/usr/bin/env python3
"""
Replace the background of a single image and write the mask next to it.
"""
from __future__ import annotations

import argparse
from pathlib import Path

import cv2

from src.compositing.background import BackgroundSelector
from src.runtime.background_remover import BackgroundRemover
from src.visualization.overlay import render_mask


def main():
    parser = argparse.ArgumentParser(description="Background replacement on one image")
    parser.add_argument("--model", required=True)
    parser.add_argument("--family", required=True)
    parser.add_argument("--image", required=True)
    parser.add_argument("--background", default=None, help="Replacement image; solid green when omitted")
    parser.add_argument("--out", default="results/segment_image")
    parser.add_argument("--threads", type=int, default=4)
    args = parser.parse_args()

    bgr = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if bgr is None:
        raise RuntimeError(f"Cannot read image: {args.image}")
    frame = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    background = BackgroundSelector(image_path=args.background)
    with BackgroundRemover(args.model, args.family, args.threads) as remover:
        remover.process_frame(frame, background.for_frame(frame))
        cv2.imwrite(str(out_dir / "composite.png"), cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
        cv2.imwrite(str(out_dir / "mask.png"), render_mask(remover.last_frame_mask))
        cv2.imwrite(str(out_dir / "mask_low_res.png"), render_mask(remover.last_mask))
        latency = remover.engine.last_inference_ms

    print("✅ Segmentation OK")
    print("Mask shape:", remover.last_frame_mask.shape)
    print("Background ratio:", round(float(remover.last_frame_mask.mean()), 4))
    print("Latency (ms):", round(latency, 2))
    print("Written to:", out_dir)


if __name__ == "__main__":
    main()
