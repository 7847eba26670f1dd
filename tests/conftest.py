import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication

from surfaceviz.controller.scheduler import ManualTickScheduler
from surfaceviz.controller.surface import SurfaceController
from surfaceviz.model.point_cloud import PointCloudLoader
from surfaceviz.model.state import EngineState


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """QObjects and QTimers need an application instance."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def scheduler():
    return ManualTickScheduler()


@pytest.fixture
def cloud_dir(tmp_path):
    (tmp_path / "rabbit.xyz").write_text("0.1 0.2 0.3\n0.4, 0.5, 0.6\nnot a point\n")
    (tmp_path / "helix.xyz").write_text("1.0, 2.0, 3.0\n")
    return tmp_path


@pytest.fixture
def small_state():
    """5 x 5 samples on [-1, 1] x [-1, 1]."""
    return EngineState(lower_limit=-1.0, length=2.0, resolution=0.5)


@pytest.fixture
def controller(small_state, scheduler, cloud_dir):
    return SurfaceController(
        small_state,
        scheduler=scheduler,
        loader=PointCloudLoader(directory=str(cloud_dir)),
    )
