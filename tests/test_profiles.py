import pytest

from src.segmentation.profiles import (
    DEEPLABV3_LABELS,
    MEAN_SUBTRACTION,
    PERSON_CLASS_INDEX,
    SYMMETRIC_RESCALE,
    ModelFamily,
    MultiClassProfile,
    ProbabilityScalarProfile,
    resolve_profile,
)
from src.utils.errors import ModelConfigError


def test_deeplabv3_profile():
    profile = resolve_profile("deeplabv3")
    assert isinstance(profile, MultiClassProfile)
    assert profile.output_channels == 21
    assert profile.valid_strides == {1}
    assert profile.normalization is SYMMETRIC_RESCALE
    assert profile.person_index == PERSON_CLASS_INDEX == 15
    assert profile.person_label == "person"


@pytest.mark.parametrize(
    "name, strides, policy",
    [
        ("bodypix_resnet", {16, 32}, MEAN_SUBTRACTION),
        ("bodypix_mobilenet", {8, 16}, SYMMETRIC_RESCALE),
    ],
)
def test_bodypix_profiles(name, strides, policy):
    profile = resolve_profile(name)
    assert isinstance(profile, ProbabilityScalarProfile)
    assert profile.output_channels == 1
    assert profile.valid_strides == strides
    assert profile.normalization is policy
    assert profile.threshold == 0.5
    assert profile.input_channels == 3


def test_unknown_family_is_config_error():
    with pytest.raises(ModelConfigError, match="Invalid model type"):
        resolve_profile("mobilenet_ssd")


def test_family_names_must_match_exactly():
    assert ModelFamily.parse("deeplabv3") is ModelFamily.DEEPLABV3
    for name in ("DeepLabV3", "DEEPLABV3", " deeplabv3", "bodypix_resnet "):
        with pytest.raises(ModelConfigError):
            resolve_profile(name)
    assert resolve_profile(ModelFamily.BODYPIX_RESNET).family is ModelFamily.BODYPIX_RESNET


def test_overrides_replace_named_constants():
    assert resolve_profile("bodypix_mobilenet", threshold=0.7).threshold == 0.7
    assert resolve_profile("deeplabv3", person_class_index=12).person_label == DEEPLABV3_LABELS[12]
    # None means "keep the default"
    assert resolve_profile("deeplabv3", person_class_index=None).person_index == 15


def test_person_index_must_be_a_class():
    with pytest.raises(ModelConfigError):
        resolve_profile("deeplabv3", person_class_index=21)


def test_profiles_are_immutable():
    profile = resolve_profile("deeplabv3")
    with pytest.raises(Exception):
        profile.person_index = 3
