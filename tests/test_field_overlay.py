import numpy as np
import pytest

from conftest import expected_blend
from rendering.field_overlay import (
    blend_pixel,
    check_dimensions,
    draw_field,
    encode_channels,
    encode_sample_color,
    lerp_channels,
)
from rendering.pixel_buffer import PixelBuffer
from track.navigation_field import NavigationField, NavigationSample
from utils.errors import FieldLookupError


def filled_buffer(width, height, color):
    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    rgb[:, :] = color
    return PixelBuffer.from_top_down(rgb)


def test_encode_centerline_start_of_first_section():
    sample = NavigationSample(section_id=0, section_distance=0.5, center_distance=0.0)
    assert encode_sample_color(sample, 1) == (255, 0, 128)


def test_encode_track_edge_is_black():
    sample = NavigationSample(section_id=0, section_distance=0.0, center_distance=1.0)
    assert encode_sample_color(sample, 4) == (0, 0, 0)


def test_encode_ignores_center_distance_sign():
    left = NavigationSample(section_id=1, section_distance=0.25, center_distance=-0.5)
    right = NavigationSample(section_id=1, section_distance=0.25, center_distance=0.5)
    assert encode_sample_color(left, 4) == encode_sample_color(right, 4)


@pytest.mark.parametrize("section_count", [1, 2, 3, 7, 100, 1000])
def test_last_section_green_stays_below_255(section_count):
    sample = NavigationSample(section_id=section_count - 1, section_distance=0.0, center_distance=0.0)
    _, g, _ = encode_sample_color(sample, section_count)
    assert g < 255
    assert g == (section_count - 1) * 255 // section_count


def test_green_truncates_instead_of_rounding():
    # 4 * 255 / 7 = 145.71
    sample = NavigationSample(section_id=4, section_distance=0.0, center_distance=0.0)
    assert encode_sample_color(sample, 7)[1] == 145


def test_encode_channels_unclamped_by_default():
    r, g, b = encode_channels(np.array([3]), np.array([1.5]), np.array([-2.0]), 2)
    assert r[0] == -255
    assert g[0] == 382
    assert b[0] == 383


def test_encode_channels_clamped_on_request():
    r, g, b = encode_channels(np.array([3]), np.array([1.5]), np.array([-2.0]), 2, clamp=True)
    assert (r[0], g[0], b[0]) == (0, 255, 255)


def test_encode_rejects_zero_section_count():
    with pytest.raises(ValueError):
        encode_channels(np.array([0]), np.array([0.0]), np.array([0.0]), 0)


def test_lerp_truncates_toward_zero():
    assert list(lerp_channels([100, 150, 0], [255, 0, 128], 0.7)) == [
        int(100 + 155 * 0.7), int(150 - 150 * 0.7), int(128 * 0.7)
    ]


def test_blend_pixel_moves_seventy_percent_toward_color():
    buffer = filled_buffer(1, 1, (200, 100, 50))
    blend_pixel(buffer, 0, 0, (0, 0, 0))
    assert buffer.get_pixel(0, 0) == (
        expected_blend(200, 0), expected_blend(100, 0), expected_blend(50, 0), 255
    )


def test_pixels_without_sample_are_unchanged():
    rng = np.random.default_rng(7)
    rgb = rng.integers(0, 256, size=(6, 5, 3), dtype=np.uint8)
    buffer = PixelBuffer.from_top_down(rgb)
    before = buffer.pixels.copy()

    sample = NavigationSample(section_id=1, section_distance=0.3, center_distance=0.2)
    table = NavigationField.from_samples(5, 6, 3, {(2, 1): sample, (4, 5): sample})
    draw_field(buffer, table)

    changed = np.any(buffer.pixels != before, axis=2)
    assert changed.sum() <= 2
    untouched = np.ones((6, 5), dtype=bool)
    untouched[buffer.physical_row(1), 2] = False
    untouched[buffer.physical_row(5), 4] = False
    assert np.array_equal(buffer.pixels[untouched], before[untouched])


def test_empty_field_leaves_buffer_identical():
    buffer = filled_buffer(4, 4, (12, 34, 56))
    before = buffer.pixels.copy()
    draw_field(buffer, NavigationField(4, 4, 0))
    assert np.array_equal(buffer.pixels, before)


def test_edge_sample_blends_toward_black():
    buffer = filled_buffer(3, 3, (90, 180, 240))
    sample = NavigationSample(section_id=0, section_distance=0.0, center_distance=1.0)
    table = NavigationField.from_samples(3, 3, 5, {(1, 1): sample})
    draw_field(buffer, table)
    assert buffer.get_pixel(1, 1) == (
        expected_blend(90, 0), expected_blend(180, 0), expected_blend(240, 0), 255
    )


def test_logical_row_is_written_to_flipped_physical_row():
    buffer = filled_buffer(2, 4, (0, 0, 0))
    sample = NavigationSample(section_id=0, section_distance=0.0, center_distance=0.0)
    table = NavigationField.from_samples(2, 4, 1, {(0, 0): sample})
    draw_field(buffer, table)

    top_down = buffer.to_top_down()
    assert tuple(top_down[0, 0]) == (expected_blend(0, 255), 0, 0)
    assert buffer.get_pixel(0, 3)[0] == expected_blend(0, 255)
    assert buffer.get_pixel(0, 0) == (0, 0, 0, 255)


def test_second_pass_moves_further_toward_target():
    buffer = filled_buffer(1, 1, (0, 200, 0))
    sample = NavigationSample(section_id=0, section_distance=0.5, center_distance=0.0)
    table = NavigationField.from_samples(1, 1, 1, {(0, 0): sample})

    once = draw_field(buffer, table).get_pixel(0, 0)
    twice = draw_field(buffer, table).get_pixel(0, 0)

    assert once != twice
    assert once[:3] == (expected_blend(0, 255), expected_blend(200, 0), expected_blend(0, 128))
    assert twice[:3] == (
        expected_blend(once[0], 255), expected_blend(once[1], 0), expected_blend(once[2], 128)
    )
    assert abs(255 - twice[0]) < abs(255 - once[0])


def test_out_of_range_sample_wraps_without_error():
    buffer = filled_buffer(1, 1, (0, 0, 0))
    sample = NavigationSample(section_id=0, section_distance=0.0, center_distance=3.0)
    table = NavigationField.from_samples(1, 1, 1, {(0, 0): sample})
    draw_field(buffer, table)
    # R encodes to -510, blends to int(-357.0) and wraps into the byte
    assert buffer.get_pixel(0, 0)[0] == int(0 + (-510 - 0) * 0.7) & 0xFF


def test_clamped_out_of_range_sample_saturates():
    buffer = filled_buffer(1, 1, (100, 100, 100))
    sample = NavigationSample(section_id=0, section_distance=2.0, center_distance=3.0)
    table = NavigationField.from_samples(1, 1, 1, {(0, 0): sample})
    draw_field(buffer, table, clamp_channels=True)
    assert buffer.get_pixel(0, 0)[:3] == (
        expected_blend(100, 0), expected_blend(100, 0), expected_blend(100, 255)
    )


def test_custom_blend_factor():
    buffer = filled_buffer(1, 1, (0, 0, 0))
    sample = NavigationSample(section_id=0, section_distance=1.0, center_distance=0.0)
    table = NavigationField.from_samples(1, 1, 1, {(0, 0): sample})
    draw_field(buffer, table, blend_factor=1.0)
    assert buffer.get_pixel(0, 0) == (255, 0, 255, 255)


def test_progress_reports_every_row_from_0_to_100():
    buffer = filled_buffer(3, 5, (0, 0, 0))
    reported = []
    draw_field(buffer, NavigationField(3, 5, 1), progress=reported.append)
    assert reported == [0, 25, 50, 75, 100]


def test_progress_on_single_row_buffer():
    reported = []
    draw_field(filled_buffer(3, 1, (0, 0, 0)), NavigationField(3, 1, 1), progress=reported.append)
    assert reported == [100]


@pytest.mark.parametrize("size", [(4, 5), (5, 4), (3, 3)])
def test_dimension_mismatch_raises(size):
    buffer = filled_buffer(4, 4, (0, 0, 0))
    table = NavigationField(size[0], size[1], 1)
    with pytest.raises(FieldLookupError):
        check_dimensions(buffer, table)
    with pytest.raises(FieldLookupError):
        draw_field(buffer, table)


@pytest.mark.parametrize("section_distance", [253.5 / 255, 0.5, 1.5 / 255, 0.1])
def test_draw_field_matches_single_sample_encoding(section_distance):
    sample = NavigationSample(section_id=2, section_distance=section_distance,
                              center_distance=-100.5 / 255)
    table = NavigationField.from_samples(1, 1, 3, {(0, 0): sample})
    buffer = filled_buffer(1, 1, (40, 80, 120))

    draw_field(buffer, table, blend_factor=1.0)

    assert buffer.get_pixel(0, 0)[:3] == encode_sample_color(sample, 3)
