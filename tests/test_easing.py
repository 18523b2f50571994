import pytest

from cursorcast.easing import (
    EASING_FUNCTIONS,
    Easing,
    clamp,
    ease_in,
    ease_in_out,
    ease_out,
    get_easing,
    lerp,
    lerp_eased,
    parse_easing,
)


@pytest.mark.parametrize("easing", list(Easing))
def test_boundaries_preserved(easing):
    f = EASING_FUNCTIONS[easing]
    assert f(0.0) == pytest.approx(0.0)
    assert f(1.0) == pytest.approx(1.0)


@pytest.mark.parametrize("easing", list(Easing))
def test_monotonic(easing):
    f = EASING_FUNCTIONS[easing]
    values = [f(i / 100) for i in range(101)]
    assert values == sorted(values)


def test_curve_shapes():
    assert ease_in(0.5) == pytest.approx(0.25)
    assert ease_out(0.5) == pytest.approx(0.75)
    assert ease_in_out(0.5) == pytest.approx(0.5)
    assert ease_in_out(0.25) < 0.25


def test_parse_easing_accepts_camel_case():
    assert parse_easing("easeInOut") is Easing.EASE_IN_OUT
    assert parse_easing("ease_out") is Easing.EASE_OUT
    assert parse_easing(Easing.EASE_IN) is Easing.EASE_IN


def test_unknown_easing_is_linear():
    assert parse_easing("bounce") is Easing.LINEAR
    assert parse_easing(None) is Easing.LINEAR
    assert get_easing("bounce")(0.3) == pytest.approx(0.3)


def test_lerp_and_clamp():
    assert lerp(10, 20, 0.5) == 15
    assert lerp_eased(0, 100, 0.5, "ease_in") == pytest.approx(25)
    assert clamp(-1, 0, 10) == 0
    assert clamp(11, 0, 10) == 10
    assert clamp(5, 0, 10) == 5
