import matplotlib
import pytest

matplotlib.use("Agg")

from soundtrack_reader.models import PixelBuffer, Region  # noqa: E402

from .synthetic import make_sine_image  # noqa: E402


@pytest.fixture
def sine_track() -> PixelBuffer:
    return PixelBuffer(make_sine_image())


@pytest.fixture
def track_region() -> Region:
    return Region(30, 0, 60, 200)
