"""Tests for stick and button debouncing, and the keyboard source."""

from collections import defaultdict

import pygame

from armada.config import (
    HOLD_LIMIT_TICKS,
    JOY_CENTER_RAW,
    JOY_FULL_RAW,
    JOY_MAX_RAW,
    JOY_MIN_RAW,
    JOY_REPEAT_DELAY_TICKS,
    LONG_PRESS_TICKS,
)
from armada.input.handler import AXIS_X, AXIS_Y, Direction, InputHandler, axis_direction
from armada.input.keyboard import KeyboardInput
from tests.harness import ScriptedInput


def hold(handler: InputHandler, start: int, ticks: int):
    return [handler.poll(t) for t in range(start, start + ticks)]


class TestAxisDirection:
    def test_centre_is_none(self):
        assert axis_direction(JOY_CENTER_RAW, JOY_CENTER_RAW) is None

    def test_dead_zone_edges(self):
        assert axis_direction(JOY_MIN_RAW, JOY_MAX_RAW) is None
        assert axis_direction(JOY_MIN_RAW - 1, JOY_CENTER_RAW) == Direction.LEFT
        assert axis_direction(JOY_MAX_RAW + 1, JOY_CENTER_RAW) == Direction.RIGHT

    def test_vertical_wins(self):
        assert axis_direction(0, 0) == Direction.UP
        assert axis_direction(JOY_FULL_RAW, JOY_FULL_RAW) == Direction.DOWN

    def test_deltas(self):
        assert Direction.UP.delta == (-1, 0)
        assert Direction.RIGHT.delta == (0, 1)


class TestStickRepeat:
    def test_one_move_per_repeat_delay(self):
        source = ScriptedInput()
        handler = InputHandler(source)
        source.push(Direction.RIGHT)
        frames = hold(handler, 0, JOY_REPEAT_DELAY_TICKS * 2 + 1)
        moves = [f.direction for f in frames if f.direction is not None]
        assert moves == [Direction.RIGHT] * 3

    def test_allow_move_now(self):
        source = ScriptedInput()
        handler = InputHandler(source)
        source.push(Direction.UP)
        assert handler.poll(0).direction == Direction.UP
        assert handler.poll(1).direction is None
        handler.allow_move_now(2)
        assert handler.poll(2).direction == Direction.UP


class TestButton:
    def test_short_press(self):
        source = ScriptedInput()
        handler = InputHandler(source)
        source.down = True
        first = handler.poll(0)
        assert first.pressed and not first.short_press
        hold(handler, 1, 10)
        source.down = False
        release = handler.poll(11)
        assert release.short_press and not release.long_press

    def test_long_press_on_release(self):
        source = ScriptedInput()
        handler = InputHandler(source)
        source.down = True
        hold(handler, 0, LONG_PRESS_TICKS + 1)
        source.down = False
        release = handler.poll(LONG_PRESS_TICKS + 1)
        assert release.long_press and not release.short_press

    def test_long_press_while_held(self):
        source = ScriptedInput()
        handler = InputHandler(source)
        source.down = True
        frames = hold(handler, 0, HOLD_LIMIT_TICKS + 50)
        assert [f.long_press for f in frames].count(True) == 1
        assert frames[HOLD_LIMIT_TICKS].long_press
        source.down = False
        release = handler.poll(HOLD_LIMIT_TICKS + 50)
        assert not (release.short_press or release.long_press)

    def test_consumed_press_has_no_release_event(self):
        source = ScriptedInput()
        handler = InputHandler(source)
        source.down = True
        assert handler.poll(0).pressed
        handler.consume()
        source.down = False
        release = handler.poll(5)
        assert not (release.short_press or release.long_press)


class TestKeyboardInput:
    def _keys(self, monkeypatch, *pressed):
        state = defaultdict(bool, {k: True for k in pressed})
        monkeypatch.setattr(pygame.key, "get_pressed", lambda: state)

    def test_idle_is_centred(self, monkeypatch):
        self._keys(monkeypatch)
        source = KeyboardInput()
        assert source.read_axis(AXIS_X) == JOY_CENTER_RAW
        assert source.read_axis(AXIS_Y) == JOY_CENTER_RAW
        assert not source.button_pressed()

    def test_arrows_and_wasd(self, monkeypatch):
        self._keys(monkeypatch, pygame.K_LEFT, pygame.K_s)
        source = KeyboardInput()
        assert source.read_axis(AXIS_X) == 0
        assert source.read_axis(AXIS_Y) == JOY_FULL_RAW

    def test_opposite_keys_cancel(self, monkeypatch):
        self._keys(monkeypatch, pygame.K_LEFT, pygame.K_d)
        assert KeyboardInput().read_axis(AXIS_X) == JOY_CENTER_RAW

    def test_button_keys(self, monkeypatch):
        self._keys(monkeypatch, pygame.K_RETURN)
        assert KeyboardInput().button_pressed()
