import os

os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

import matplotlib

matplotlib.use("Agg")

import pytest

from fractals import FrameComposer, RenderParameters, Viewport


@pytest.fixture
def composer():
    composer = FrameComposer(chunk_rows=8, max_workers=2)
    yield composer
    composer.close()


@pytest.fixture
def viewport():
    return Viewport()


@pytest.fixture
def params():
    return RenderParameters(base_iterations=40)
