import pytest

from mandelscope.transform import CoordinateTransform


def reachable_transforms():
    """A few transforms reachable through zoom/center_at/reset."""
    plain = CoordinateTransform((200, 300))

    zoomed = CoordinateTransform((200, 300))
    zoomed.zoom(2.0)
    zoomed.zoom(5.0)

    centered = CoordinateTransform((200, 300))
    centered.zoom(37.5)
    centered.center_at(complex(-0.7436, 0.1318))

    reset = CoordinateTransform((200, 300))
    reset.zoom(0.25)
    reset.center_at(complex(1.5, -0.5))
    reset.reset()

    return [plain, zoomed, centered, reset]


def test_fresh_transform_has_unit_zoom():
    transform = CoordinateTransform((200, 300))
    assert transform.zoom_factor() == 1.0


def test_zoom_factor_accumulates():
    transform = CoordinateTransform((200, 300))

    transform.zoom(2.0)
    assert transform.zoom_factor() == 2.0

    transform.zoom(5.0)
    assert transform.zoom_factor() == 10.0

    transform.zoom(0.5)
    assert transform.zoom_factor() == 5.0


def test_default_view_formula():
    transform = CoordinateTransform((200, 300))
    scale = 200 * 0.28
    z = transform.screen_to_complex(100, 100)
    assert abs(z.real - (100 - 200 * 0.7) / scale) < 1e-9
    assert abs(z.imag - (100 - 300 * 0.5) / scale) < 1e-9


def test_y_axis_points_down():
    transform = CoordinateTransform((200, 300))
    assert transform.screen_to_complex(10, 200).imag > transform.screen_to_complex(10, 100).imag


@pytest.mark.parametrize("transform", reachable_transforms())
def test_round_trip_within_one_pixel(transform):
    width, height = transform.viewport
    for y in range(0, height, 7):
        for x in range(0, width, 5):
            sx, sy = transform.complex_to_screen(transform.screen_to_complex(x, y))
            assert abs(sx - x) <= 1
            assert abs(sy - y) <= 1


def test_zoom_keeps_center_point():
    transform = CoordinateTransform((201, 300))
    transform.center_at(complex(-0.5, 0.25))
    before = transform.screen_to_complex(100.5, 150.0)

    transform.zoom(8.0)

    after = transform.screen_to_complex(100.5, 150.0)
    assert after.real == pytest.approx(before.real, abs=1e-12)
    assert after.imag == pytest.approx(before.imag, abs=1e-12)


def test_center_at_keeps_scale():
    transform = CoordinateTransform((200, 300))
    transform.zoom(3.0)
    scale = transform.scale
    z = complex(-1.25, 0.1)

    transform.center_at(z)

    assert transform.scale == scale
    center = transform.screen_to_complex(100.0, 150.0)
    assert center.real == pytest.approx(z.real)
    assert center.imag == pytest.approx(z.imag)


def test_reset_restores_defaults():
    transform = CoordinateTransform((200, 300))
    transform.zoom(4.0)
    transform.center_at(complex(0.3, 0.3))

    transform.reset()

    assert transform.scale == 200 * 0.28
    assert transform.offset_x == 200 * 0.7
    assert transform.offset_y == 300 * 0.5
    assert transform.zoom_factor() == 1.0


def test_snapshot_is_independent():
    transform = CoordinateTransform((200, 300))
    snapshot = transform.snapshot()

    transform.zoom(2.0)
    transform.center_at(complex(1.0, 1.0))

    assert snapshot.zoom_factor() == 1.0
    assert snapshot.offset_x == 200 * 0.7


@pytest.mark.parametrize("factor", [0.0, -2.0])
def test_zoom_rejects_non_positive_factor(factor):
    transform = CoordinateTransform((200, 300))
    with pytest.raises(ValueError):
        transform.zoom(factor)
    assert transform.zoom_factor() == 1.0


@pytest.mark.parametrize("viewport", [(0, 300), (200, -1)])
def test_rejects_empty_viewport(viewport):
    with pytest.raises(ValueError):
        CoordinateTransform(viewport)
