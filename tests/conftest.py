import numpy as np
import pytest

from raw_probe.image import RawImage


def make_image(rows, left_mask=0, top_mask=0, name='test'):
    return RawImage.from_array(np.array(rows, dtype=np.uint16), left_mask, top_mask, name)


@pytest.fixture
def ramp4():
    """4x4 physical samples 1..16"""
    return make_image(np.arange(1, 17).reshape(4, 4))


@pytest.fixture
def ramp7x6():
    """Odd sized ramp to exercise partial Bayer cells"""
    return np.arange(7 * 6, dtype=np.uint16).reshape(6, 7)
