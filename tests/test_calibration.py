import numpy as np
import pytest

from raw_probe import calibration, geometry
from raw_probe.errors import ArgumentError, CalibrationError
from raw_probe.geometry import FilterCode

from conftest import make_image


def _masked_frame():
    array = np.full((6, 8), 1000)
    array[:, :4] = 100
    return make_image(array, left_mask=4)


def test_set_black_level_single_point(ramp4):
    calibration.set_black_level(ramp4, [128])
    assert set(ramp4.black_level) == set(FilterCode)
    assert ramp4.channel(geometry.G2).black_level() == 128.0


def test_set_black_level_four_points(ramp4):
    calibration.set_black_level(ramp4, [100, 102, 104, 110])
    assert ramp4.black_level[FilterCode.G] == 103.0
    assert ramp4.black_level[FilterCode.ALL] == 104.0
    with pytest.raises(ArgumentError):
        calibration.set_black_level(ramp4, [1, 2])


def test_missing_black_level(ramp4):
    with pytest.raises(CalibrationError):
        ramp4.channel(geometry.R).black_level()


def test_black_level_from_left_mask():
    image = _masked_frame()
    calibration.calibrate_black_level(image)
    assert image.black_level == {code: 100.0 for code in FilterCode}


def test_left_mask_selection():
    image = _masked_frame()
    mask = image.channel(geometry.ALL).left_mask()
    assert (mask.x, mask.y, mask.width, mask.height) == (1, 1, 2, 4)
    full = image.channel(geometry.ALL).left_mask(safety_crop=False)
    assert (full.width, full.height) == (4, 6)


def test_left_mask_required(ramp4):
    with pytest.raises(CalibrationError):
        ramp4.channel(geometry.R).left_mask()


def test_white_level_estimated_and_explicit():
    image = make_image([[10, 20], [30, 4095]])
    assert calibration.set_white_level(image) == 4095
    assert calibration.set_white_level(image, 3692) == 3692
    assert image.white_level == 3692
    with pytest.raises(ArgumentError):
        calibration.set_white_level(image, 70000)
    with pytest.raises(ArgumentError):
        calibration.set_white_level(image, 0)
