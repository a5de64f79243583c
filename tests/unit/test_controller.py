"""Unit tests for the controller abstraction."""

import pytest

from balix.core.controller import BangBangController, Controller, PIDControllerAdapter
from balix.core.pid import PIDController


class TestPIDControllerAdapter:
    """Test the PID adapter."""

    def test_is_controller(self):
        assert isinstance(PIDControllerAdapter(), Controller)

    def test_compute_uses_caller_dt(self):
        adapter = PIDControllerAdapter(PIDController(kp=0.0, ki=1.0))
        adapter.compute(1.0, 0.0, 0.5)
        assert adapter.pid.dt == 0.5
        assert adapter.pid.integral == pytest.approx(0.5)

    def test_output_limit(self):
        adapter = PIDControllerAdapter(PIDController(kp=100.0), output_limit=3.0)
        assert adapter.compute(10.0, 0.0, 0.1) == 3.0
        assert adapter.compute(-10.0, 0.0, 0.1) == -3.0

    def test_reset(self):
        adapter = PIDControllerAdapter(PIDController(ki=1.0))
        adapter.compute(1.0, 0.0, 0.1)
        adapter.reset()
        assert adapter.pid.integral == 0.0


class TestBangBangController:
    """Test the bang-bang controller."""

    def test_switching(self):
        ctrl = BangBangController(max_output=4.0)
        assert ctrl.compute(10.0, 5.0, 0.1) == 4.0
        assert ctrl.compute(10.0, 12.0, 0.1) == -4.0
        assert ctrl.compute(10.0, 10.0, 0.1) == -4.0

    def test_is_controller(self):
        assert isinstance(BangBangController(), Controller)
