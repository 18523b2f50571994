from cursorcast.coordinates import (
    CoordinateTransform,
    Dimensions,
    RecordingRegion,
    scale_factors,
    to_video_space,
)

SCREEN = Dimensions(1440, 900)
RETINA_VIDEO = Dimensions(2880, 1800)


def test_retina_full_screen_doubles_coordinates():
    assert to_video_space(100, 250, SCREEN, RETINA_VIDEO) == (200, 500)


def test_same_size_is_identity():
    assert to_video_space(12.5, 40, SCREEN, SCREEN) == (12.5, 40)


def test_region_offset_and_scale():
    region = RecordingRegion(100, 100, 400, 300)
    video = Dimensions(800, 600)
    assert scale_factors(SCREEN, video, region) == (2.0, 2.0)
    assert to_video_space(300, 250, SCREEN, video, region) == (400, 300)


def test_results_clamped_into_video():
    region = RecordingRegion(100, 100, 400, 300)
    video = Dimensions(800, 600)
    assert to_video_space(50, 50, SCREEN, video, region) == (0, 0)
    assert to_video_space(2000, 2000, SCREEN, video, region) == (800, 600)


def test_degenerate_reference_uses_unit_scale():
    assert scale_factors(Dimensions(0, 0), RETINA_VIDEO) == (1.0, 1.0)


def test_transform_object_matches_function():
    region = RecordingRegion(10, 20, 720, 450)
    transform = CoordinateTransform(SCREEN, RETINA_VIDEO, region)
    assert (transform.scale_x, transform.scale_y) == (4.0, 4.0)
    assert transform(100, 100) == to_video_space(100, 100, SCREEN, RETINA_VIDEO, region)


def test_identity_transform():
    video = Dimensions(640, 480)
    transform = CoordinateTransform.identity(video)
    assert transform(320, 240) == (320, 240)
    assert "scale=1.00x1.00" in repr(transform)


def test_dimension_dict_round_trip():
    region = RecordingRegion(1, 2, 3, 4)
    assert RecordingRegion.from_dict(region.to_dict()) == region
    assert Dimensions.from_dict({'width': 5, 'height': 6}) == Dimensions(5, 6)
