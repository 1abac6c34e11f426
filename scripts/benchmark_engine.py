#!/usr/bin/env python3
"""
Benchmark raw inference latency of a segmentation model on random input.
"""
from __future__ import annotations

import argparse
import time
from pathlib import Path

import numpy as np

from src.inference import BACKENDS, open_engine


def bench(model: Path, threads: int, backend: str, delegate: str | None, n: int, warmup: int) -> dict:
    with open_engine(model, num_threads=threads, backend=backend, delegate=delegate) as engine:
        shape = engine.input_spec.shape[1:]
        dummy = np.random.uniform(-0.5, 0.5, size=shape).astype(np.float32)
        for _ in range(warmup):
            engine.invoke(dummy)
        latencies = []
        for _ in range(n):
            t0 = time.perf_counter()
            engine.invoke(dummy)
            latencies.append((time.perf_counter() - t0) * 1000.0)
        return {
            "engine": engine.describe(),
            "mean_ms": float(np.mean(latencies)),
            "p50_ms": float(np.percentile(latencies, 50)),
            "p95_ms": float(np.percentile(latencies, 95)),
        }


def main():
    parser = argparse.ArgumentParser(description="Benchmark inference latency")
    parser.add_argument("--model", required=True, help="Path to .tflite or .onnx model")
    parser.add_argument("--threads", type=int, default=4)
    parser.add_argument("--backend", default="auto", choices=BACKENDS)
    parser.add_argument("--delegate", default=None, help="TFLite delegate name or library")
    parser.add_argument("-n", type=int, default=50, help="Timed iterations")
    parser.add_argument("--warmup", type=int, default=5)
    args = parser.parse_args()

    res = bench(Path(args.model), args.threads, args.backend, args.delegate, args.n, args.warmup)

    print("\n=== Inference Benchmark ===")
    print(res["engine"])
    print(f"mean: {res['mean_ms']:.2f} ms  p50: {res['p50_ms']:.2f} ms  p95: {res['p95_ms']:.2f} ms")


if __name__ == "__main__":
    main()
