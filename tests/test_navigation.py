"""Tests for held-key input and the per-frame camera update."""

import numpy as np
import pytest

from anomalysim.controller.navigation import (
    Action, InputState, KEY_BINDINGS, action_for_key, mouse_look, update_camera
)
from anomalysim.model.camera import Camera


def _poses_equal(a: Camera, b: Camera) -> bool:
    return all(np.array_equal(x, y) for x, y in zip(a.pose(), b.pose()))


class TestInputState:
    def test_press_and_release(self):
        state = InputState()
        state.press(Action.FORWARD)
        state.press(Action.YAW_LEFT)
        assert state.held() == {Action.FORWARD, Action.YAW_LEFT}
        state.release(Action.FORWARD)
        assert state.held() == {Action.YAW_LEFT}

    def test_toggle_flips_on_press_only(self):
        state = InputState()
        state.press(Action.TOGGLE_ROTATION)
        assert state.spin_scene
        state.release(Action.TOGGLE_ROTATION)
        assert state.spin_scene
        state.press(Action.TOGGLE_ROTATION)
        assert not state.spin_scene

    def test_toggle_is_not_a_held_flag(self):
        state = InputState()
        state.press(Action.TOGGLE_ROTATION)
        assert state.held() == frozenset()

    def test_clear_keeps_spin(self):
        state = InputState(forward=True, pitch_down=True, spin_scene=True)
        state.clear()
        assert state.held() == frozenset()
        assert state.spin_scene


class TestKeyBindings:
    def test_lookup_is_case_insensitive(self):
        assert action_for_key("w") is Action.FORWARD
        assert action_for_key("P") is Action.TOGGLE_ROTATION

    def test_unbound_key(self):
        assert action_for_key("Z") is None

    def test_every_action_is_bound(self):
        assert set(KEY_BINDINGS.values()) == set(Action)


class TestUpdateCamera:
    def test_no_input_no_change(self):
        camera = Camera()
        assert _poses_equal(update_camera(camera, InputState()), camera)

    def test_does_not_modify_input_camera(self, level_camera):
        before = level_camera.copy()
        update_camera(level_camera, InputState(forward=True, yaw_left=True, roll_right=True))
        assert _poses_equal(level_camera, before)

    def test_forward_step(self, level_camera):
        moved = update_camera(level_camera, InputState(forward=True), step=0.5)
        np.testing.assert_allclose(moved.eye, [0.0, 0.5, 0.0], atol=1e-7)

    def test_one_increment_per_flag_per_frame(self, level_camera):
        camera = level_camera
        for _ in range(10):
            camera = update_camera(camera, InputState(right=True), step=0.01)
        np.testing.assert_allclose(camera.eye, [0.1, 0.0, 0.0], atol=1e-6)

    def test_opposite_flags_cancel(self, level_camera):
        moved = update_camera(level_camera, InputState(forward=True, back=True, up=True, down=True))
        np.testing.assert_allclose(moved.eye, level_camera.eye, atol=1e-7)

    def test_pure(self):
        state = InputState(forward=True, left=True, pitch_up=True, roll_left=True)
        a = update_camera(Camera(), state)
        b = update_camera(Camera(), state)
        assert _poses_equal(a, b)

    @pytest.mark.parametrize("flag, index, sign", [
        ("yaw_left", 0, -1.0),
        ("yaw_right", 0, 1.0),
        ("pitch_up", 2, 1.0),
        ("pitch_down", 2, -1.0),
    ])
    def test_rotation_directions(self, level_camera, flag, index, sign):
        turned = update_camera(level_camera, InputState(**{flag: True}), step=0.1)
        assert np.sign(turned.target[index]) == sign


class TestMouseLook:
    def test_drag_right_turns_right(self, level_camera):
        turned = mouse_look(level_camera, 100.0, 0.0)
        assert turned.target[0] > 0.0

    def test_drag_down_looks_down(self, level_camera):
        turned = mouse_look(level_camera, 0.0, 100.0)
        assert turned.target[2] < 0.0

    def test_sensitivity(self, level_camera):
        turned = mouse_look(level_camera, 0.0, -40.0, sensitivity=0.01)
        assert turned.pitch == pytest.approx(0.4, abs=1e-5)
        np.testing.assert_array_equal(level_camera.target, [0.0, 1.0, 0.0])
