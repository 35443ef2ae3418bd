import pytest

from raw_probe.calibration import set_black_level
from raw_probe.dpraw import DprawAction, DprawMode, DprawRequest, dpraw_process
from raw_probe.errors import ArgumentError, CalibrationError, ShapeError

from conftest import make_image

WHITE = 100


def _pair(combined_rows, secondary_rows, left_mask=0, black_combined=10, black_secondary=5):
    combined = make_image(combined_rows, left_mask)
    secondary = make_image(secondary_rows, left_mask)
    set_black_level(combined, [black_combined])
    set_black_level(secondary, [black_secondary])
    return combined, secondary


def _run(combined, secondary, action, mode, ev_shift=None, white=WHITE):
    result = dpraw_process(DprawRequest(combined, secondary, white, ev_shift, action, mode))
    return result.as_array().tolist()


def test_get_a_unclipped():
    combined, secondary = _pair([[50, 50], [50, 50]], [[40, 40], [40, 40]])
    assert _run(combined, secondary, 'geta', 'plain') == [[11, 11], [11, 11]]


@pytest.mark.parametrize("action,mode,expected", [
    (DprawAction.GET_A, DprawMode.PLAIN, [[40, 10], [9, 8]]),
    (DprawAction.GET_A, DprawMode.BAYER, [[100, 100], [100, 100]]),
    (DprawAction.BLEND, DprawMode.PLAIN, [[40, 86], [86, 86]]),
    (DprawAction.BLEND, DprawMode.BAYER, [[40, 41], [42, 43]]),
])
def test_clipped_red(action, mode, expected):
    combined, secondary = _pair([[100, 50], [50, 50]], [[40, 41], [42, 43]])
    assert _run(combined, secondary, action, mode, ev_shift=1) == expected


def test_request_defaults_to_plain_get_a():
    combined, secondary = _pair([[100, 50], [50, 50]], [[40, 41], [42, 43]])
    request = DprawRequest(combined, secondary, WHITE)
    assert (request.action, request.mode) == (DprawAction.GET_A, DprawMode.PLAIN)
    assert dpraw_process(request).as_array().tolist() == [[40, 10], [9, 8]]


def test_bayer_clipping_is_per_cell():
    combined, secondary = _pair([[100, 50, 50, 50], [50, 50, 50, 50]], [[40] * 4, [40] * 4])
    assert _run(combined, secondary, 'geta', 'bayer') == [[100, 100, 11, 11], [100, 100, 11, 11]]


def test_odd_left_mask_keeps_cells_in_step():
    combined, secondary = _pair([[0, 100, 50, 50, 50], [0, 50, 50, 50, 50]],
                                [[0, 40, 40, 40, 40], [0, 40, 40, 40, 40]], left_mask=1)
    assert _run(combined, secondary, 'geta', 'bayer') == [[0, 100, 100, 11, 11], [0, 100, 100, 11, 11]]


def test_output_is_clamped_and_read_only():
    combined, secondary = _pair([[5000, 5000], [5000, 5000]], [[0, 0], [0, 0]], black_combined=0, black_secondary=0)
    result = dpraw_process(DprawRequest(combined, secondary, 65535, 4, 'blend', 'plain'))
    assert result.as_array().tolist() == [[65535, 65535], [65535, 65535]]
    assert not result.writable
    assert result.black_level == {}


def test_size_mismatch():
    combined, _ = _pair([[50, 50], [50, 50]], [[40, 40], [40, 40]])
    other = make_image([[1, 2, 3, 4], [5, 6, 7, 8]])
    set_black_level(other, [0])
    with pytest.raises(ShapeError):
        dpraw_process(DprawRequest(combined, other, WHITE))


def test_missing_black_level():
    combined, _ = _pair([[50, 50], [50, 50]], [[40, 40], [40, 40]])
    bare = make_image([[40, 40], [40, 40]])
    with pytest.raises(CalibrationError):
        dpraw_process(DprawRequest(combined, bare, WHITE))


def test_invalid_arguments():
    combined, secondary = _pair([[50, 50], [50, 50]], [[40, 40], [40, 40]])
    with pytest.raises(ArgumentError):
        dpraw_process(DprawRequest(combined, secondary, WHITE, action='blend'))
    with pytest.raises(ArgumentError):
        dpraw_process(DprawRequest(combined, secondary, WHITE, action='merge'))
    with pytest.raises(ArgumentError):
        dpraw_process(DprawRequest(combined, secondary, WHITE, mode='cell'))
