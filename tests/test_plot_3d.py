"""Tests for the PolyData helpers used by the 3D view."""

import numpy as np
import pytest

pv = pytest.importorskip("pyvista")
pytest.importorskip("pyvistaqt")

from surfaceviz.controller.surface import SurfaceFrame
from surfaceviz.model.point_cloud import PointCloudConvention, PointCloudLoader
from surfaceviz.view.widgets.plot_3d import MarkerUtils


class TestMarkerUtils:
    def test_frame_to_polydata(self):
        frame = SurfaceFrame(
            positions=np.arange(12, dtype=np.float64).reshape(4, 3),
            colours=np.full((4, 3), 0.5),
            colour_keys=np.full(4, "0.00", dtype="<U5"),
        )
        data = MarkerUtils.frame_to_polydata(frame)
        assert data.n_points == 4
        assert data.point_data["rgb"].shape == (4, 3)

    def test_point_cloud_radii(self):
        loader = PointCloudLoader(spread=1.0)
        cloud = loader.parse(["0.1 0.1 0.1", "0.2 0.2 0.2"], PointCloudConvention.RAW)
        data = MarkerUtils.point_cloud_to_polydata(cloud, base_radius=0.1)
        assert data.n_points == 2
        np.testing.assert_allclose(data.point_data["radius"], [0.3, 0.3])

    def test_axes(self):
        data = MarkerUtils.axes_polydata(8.0)
        assert data.n_points == 6
        assert data.n_lines == 3
        np.testing.assert_allclose(data.bounds, (-4.0, 4.0, -4.0, 4.0, -4.0, 4.0))
