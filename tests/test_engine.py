import numpy as np
import pytest

from src.inference import open_engine
from src.inference.onnx_engine import select_providers
from src.utils.errors import InferenceError, ModelConfigError


def test_invoke_copies_buffer_and_strips_batch(make_engine):
    output = np.arange(16 * 16 * 21, dtype=np.float32).reshape(1, 16, 16, 21)
    engine = make_engine(output=output)
    tensor = np.random.default_rng(0).uniform(-0.5, 0.5, size=(16, 16, 3)).astype(np.float32)

    result = engine.invoke(tensor)

    assert result.shape == (16, 16, 21)
    assert np.array_equal(result, output[0])
    assert engine.calls[0].shape == (1, 16, 16, 3)
    assert engine.calls[0].tobytes() == tensor.tobytes()
    assert engine.last_inference_ms >= 0.0


def test_non_square_input_is_a_byte_copy(make_engine):
    engine = make_engine(input_shape=(1, 8, 4, 3), output_shape=(1, 8, 4, 21))
    tensor = np.arange(4 * 8 * 3, dtype=np.float32).reshape(4, 8, 3)
    engine.invoke(tensor)
    assert engine.calls[0].tobytes() == tensor.tobytes()


def test_wrong_buffer_size_is_rejected(make_engine):
    engine = make_engine()
    with pytest.raises(InferenceError, match="bytes"):
        engine.invoke(np.zeros((8, 8, 3), dtype=np.float32))
    assert engine.calls == []


def test_backend_failure_is_inference_error(make_engine):
    engine = make_engine(fail_with=RuntimeError("delegate lost"))
    with pytest.raises(InferenceError, match="delegate lost"):
        engine.invoke(np.zeros((16, 16, 3), dtype=np.float32))


def test_close_is_idempotent_and_final(make_engine):
    with make_engine() as engine:
        pass
    assert engine.released
    engine.close()
    with pytest.raises(InferenceError, match="closed"):
        engine.invoke(np.zeros((16, 16, 3), dtype=np.float32))


def test_open_engine_rejects_unknown_extension(tmp_path):
    with pytest.raises(ModelConfigError, match="extension"):
        open_engine(tmp_path / "model.pb")


def test_open_engine_rejects_unknown_backend(tmp_path):
    with pytest.raises(ModelConfigError, match="backend"):
        open_engine(tmp_path / "model.onnx", backend="tensorrt")


def test_missing_onnx_model(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_engine(tmp_path / "missing.onnx")


def test_providers_always_fall_back_to_cpu():
    providers = select_providers(["NoSuchExecutionProvider"])
    assert providers == ["CPUExecutionProvider"]
    assert select_providers()[-1] == "CPUExecutionProvider"
