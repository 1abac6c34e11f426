from src.inputs.video_input import VideoInput, parse_source


def test_video_input_configures_path_without_opening():
    vi = VideoInput("/tmp/video.mp4", allow_missing=True)
    assert str(vi.path) == "/tmp/video.mp4"
    assert not vi.is_camera
    assert list(vi.frames()) == []


def test_camera_indices_are_parsed():
    assert parse_source("0") == 0
    assert parse_source(2) == 2
    assert parse_source("clip.mp4") == "clip.mp4"


def test_max_frames_caps_total():
    vi = VideoInput("/tmp/video.mp4", allow_missing=True, max_frames=5)
    assert vi.total_frames == 5
