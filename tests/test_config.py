from pathlib import Path

import pytest

from src.segmentation.profiles import resolve_profile
from src.utils.config import get, load_yaml, set_path
from src.utils.errors import ModelConfigError

REPO_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "system.yaml"


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "nope.yaml")


def test_non_mapping_config(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ModelConfigError):
        load_yaml(path)


def test_dotted_get_and_set():
    cfg = {"model": {"threads": 4}}
    assert get(cfg, "model.threads") == 4
    assert get(cfg, "model.family", "deeplabv3") == "deeplabv3"
    assert get(cfg, "runtime.overlay.enabled", False) is False

    set_path(cfg, "runtime.overlay.enabled", True)
    set_path(cfg, "model.threads", None)
    assert cfg["runtime"]["overlay"]["enabled"] is True
    assert cfg["model"]["threads"] == 4


def test_repo_config_is_usable():
    cfg = load_yaml(REPO_CONFIG)
    profile = resolve_profile(
        get(cfg, "model.family"),
        person_class_index=get(cfg, "model.person_class_index"),
        threshold=get(cfg, "model.threshold"),
    )
    assert profile.family.value == "deeplabv3"
    assert get(cfg, "runtime.interpolation") == "linear"
