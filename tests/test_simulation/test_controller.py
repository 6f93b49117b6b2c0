"""Tests for the match controller's transition rules."""

from armada.audio.sounds import AudioEvent
from armada.config import (
    ATTACK_RESEND_TICKS,
    FLEET_CELLS,
    INVALID_NOTICE_TICKS,
    LONG_PRESS_TICKS,
    READY_RESEND_TICKS,
)
from armada.input.handler import Direction
from armada.networking.protocol import Attack, Ready, Result
from armada.rendering.display import CellVisual, Screen, Side
from armada.simulation.state import Difficulty, MenuItem, Mode, NetState, Phase, SettingsItem
from tests.harness import Harness


class TestStartup:
    def test_first_step_shows_main_menu(self, harness):
        harness.run(1)
        harness.assert_phase(Phase.MAIN_MENU, NetState.IDLE)
        assert harness.display.screens == [Screen.MAIN_MENU]

    def test_menu_navigation(self, harness):
        harness.run(1)
        harness.nudge(Direction.DOWN)
        assert harness.session.menu_item == MenuItem.SINGLEPLAYER
        harness.run(200)  # past the repeat delay
        harness.nudge(Direction.RIGHT)
        assert harness.session.menu_item == MenuItem.SETTINGS
        harness.run(200)
        harness.nudge(Direction.LEFT)
        harness.run(200)
        harness.nudge(Direction.UP)
        assert harness.session.menu_item == MenuItem.MULTIPLAYER
        assert harness.display.menu_selections[-1] == MenuItem.MULTIPLAYER

    def test_press_without_selection_does_nothing(self, harness):
        harness.run(1)
        harness.tap()
        harness.assert_phase(Phase.MAIN_MENU)

    def test_press_on_mode_starts_placement(self, harness):
        harness.run(1)
        harness.nudge(Direction.DOWN)
        harness.tap()
        assert harness.session.mode == Mode.SINGLEPLAYER
        harness.assert_phase(Phase.PLACING)
        assert harness.display.screens[-1] == Screen.PLACEMENT
        # The press that left the menu must not also place a ship
        assert harness.session.own.fleet == []

    def test_new_game_resets_active_transport(self, harness):
        harness.run(1)
        harness.channel.inject_line("READY 7")
        harness.controller.start_game(Mode.MULTIPLAYER)
        harness.channel.inject_line("READY 8")
        # One line is consumed by this step's poll, the other is cleared
        harness.run(1)
        assert harness.channel.poll() is None


class TestSettings:
    def _open_settings(self, h: Harness) -> None:
        h.run(1)
        h.nudge(Direction.DOWN)
        h.run(200)
        h.nudge(Direction.RIGHT)
        h.tap()
        h.assert_phase(Phase.SETTINGS)
        h.run(200)

    def test_toggle_sound(self, harness):
        self._open_settings(harness)
        assert harness.session.settings_item == SettingsItem.SOUND
        harness.tap()
        assert harness.settings.sounds_enabled is False
        harness.tap()
        assert harness.settings.sounds_enabled is True

    def test_cycle_difficulty(self, harness):
        self._open_settings(harness)
        harness.nudge(Direction.DOWN)
        assert harness.session.settings_item == SettingsItem.DIFFICULTY
        harness.tap()
        assert harness.settings.difficulty == Difficulty.ADMIRAL
        harness.tap()
        assert harness.settings.difficulty == Difficulty.LIEUTENANT

    def test_back_returns_to_menu(self, harness):
        self._open_settings(harness)
        harness.nudge(Direction.UP)  # wraps from Sound to Back
        assert harness.session.settings_item == SettingsItem.BACK
        harness.tap()
        harness.assert_phase(Phase.MAIN_MENU)

    def test_settings_survive_reset(self, harness):
        self._open_settings(harness)
        harness.tap()
        harness.controller.start_game(Mode.MULTIPLAYER)
        harness.run(1)
        harness.session.reset()
        assert harness.settings.sounds_enabled is False


class TestPlacement:
    def test_short_press_places_ship_at_cursor(self, harness):
        harness.start()
        harness.tap()
        fleet = harness.session.own.fleet
        assert len(fleet) == 1
        assert (fleet[0].row, fleet[0].col, fleet[0].length) == (5, 5, 5)
        assert harness.session.own.remaining == 5
        assert harness.display.cells[(Side.PLAYER, 5, 9)] == CellVisual.SHIP

    def test_long_press_toggles_orientation(self, harness):
        harness.start()
        harness.tap(hold_ticks=LONG_PRESS_TICKS + 100)
        assert harness.session.horizontal is False
        assert harness.session.own.fleet == []
        assert (harness.session.cursor_row, harness.session.cursor_col) == (5, 5)

    def test_held_button_toggles_without_release(self, harness):
        harness.start()
        harness.input.down = True
        harness.run(1001)
        assert harness.session.horizontal is False
        harness.input.down = False
        harness.run(1)
        assert harness.session.horizontal is False
        assert harness.session.own.fleet == []

    def test_invalid_placement_shows_notice(self, harness):
        harness.start()
        harness.tap()  # length 5 at (5, 5)
        harness.tap()  # length 4 at (5, 5) overlaps
        assert len(harness.session.own.fleet) == 1
        assert harness.display.status == "Invalid placement!"

        # Input is ignored while the notice is up
        harness.input.push(Direction.UP)
        harness.run(10)
        harness.input.push(None)
        assert harness.session.cursor_row == 5

        harness.run(INVALID_NOTICE_TICKS)
        assert harness.display.status == "Use stick to place"
        harness.nudge(Direction.UP)
        harness.tap()
        assert len(harness.session.own.fleet) == 2

    def test_cursor_clamped_for_ship_length(self, harness):
        harness.start()
        for _ in range(6):
            harness.nudge(Direction.RIGHT)
            harness.run(200)
        # A length-5 horizontal ship can start no further right than column 5
        assert harness.session.cursor_col == 5

    def test_last_ship_sends_ready(self, harness):
        harness.start()
        harness.place_fleet()
        harness.assert_phase(Phase.WAITING_FOR_PEER, NetState.WAIT_READY)
        ready = harness.channel.sent_of(Ready)
        assert len(ready) == 1
        assert ready[0].token == harness.session.self_token != 0
        assert harness.session.own.remaining == FLEET_CELLS

    def test_ready_resent_while_waiting(self, harness):
        harness.start()
        harness.place_fleet()
        harness.run(READY_RESEND_TICKS)
        assert len(harness.channel.sent_of(Ready)) == 2

    def test_early_ready_is_kept(self, harness):
        harness.start()
        harness.channel.inject(Ready(9))
        harness.run(1)
        harness.place_fleet()
        harness.assert_phase(Phase.WAITING_FOR_PEER, NetState.DECIDE)
        harness.session.self_token = 10
        harness.run(1)
        harness.assert_phase(Phase.MY_TURN)


class TestTurnOrder:
    def test_larger_token_moves_first(self, harness):
        harness.start()
        harness.place_fleet()
        harness.decide(self_token=100, peer_token=50)
        harness.assert_phase(Phase.MY_TURN, NetState.MY_TURN)
        assert harness.session.enemy.remaining == FLEET_CELLS
        assert harness.display.screens[-1] == Screen.PLAY

    def test_smaller_token_waits(self, harness):
        harness.start()
        harness.place_fleet()
        harness.decide(self_token=50, peer_token=100)
        harness.assert_phase(Phase.ENEMY_TURN, NetState.PEER_TURN)

    def test_zero_token_is_lowest(self, harness):
        harness.start()
        harness.place_fleet()
        harness.channel.inject_line("READY 0")
        harness.run(1)
        assert harness.session.peer_token == 0
        harness.assert_phase(Phase.MY_TURN, NetState.MY_TURN)

    def test_zero_token_before_placement_ends(self, harness):
        harness.start()
        harness.channel.inject_line("READY 0")
        harness.run(1)
        harness.place_fleet()
        harness.assert_phase(Phase.WAITING_FOR_PEER, NetState.DECIDE)
        harness.run(1)
        harness.assert_phase(Phase.MY_TURN)

    def test_tie_redraws_and_ignores_tied_token(self, harness):
        harness.start()
        harness.place_fleet()
        harness.decide(self_token=77, peer_token=77)
        s = harness.session
        harness.assert_phase(Phase.WAITING_FOR_PEER, NetState.WAIT_READY)
        assert 77 in s.tied_tokens
        assert s.self_token not in (0, 77)
        assert harness.channel.sent_of(Ready)[-1].token == s.self_token

        # The peer's retransmitted tied READY is ignored
        harness.channel.inject(Ready(77))
        harness.run(1)
        harness.assert_phase(Phase.WAITING_FOR_PEER, NetState.WAIT_READY)

        harness.channel.inject(Ready(s.self_token + 1))
        harness.run(1)
        harness.assert_phase(Phase.ENEMY_TURN)

    def test_tied_token_accepted_after_tie_window(self, harness):
        # A peer that never saw the tie keeps sending its old token
        harness.start()
        harness.place_fleet()
        harness.decide(self_token=77, peer_token=77)
        s = harness.session
        assert s.self_token < 77

        harness.run(READY_RESEND_TICKS)
        harness.channel.inject(Ready(77))
        harness.run(1)
        assert s.peer_token == 77
        harness.assert_phase(Phase.ENEMY_TURN)

    def test_ready_keeps_being_sent_during_grace(self, harness):
        harness.reach_play(i_start=True)
        before = len(harness.channel.sent_of(Ready))
        harness.run(READY_RESEND_TICKS)
        assert len(harness.channel.sent_of(Ready)) == before + 1

    def test_attack_before_decision_means_peer_started(self, harness):
        harness.start()
        harness.place_fleet()
        harness.channel.inject(Attack(0, 0))
        harness.run(1)
        assert harness.channel.sent_of(Result) == [Result(0, 0, True)]
        harness.assert_phase(Phase.MY_TURN, NetState.MY_TURN)
        assert harness.session.enemy.remaining == FLEET_CELLS

    def test_attack_while_idle_is_dropped(self, harness):
        harness.run(1)
        harness.channel.inject(Attack(0, 0))
        harness.run(1)
        assert harness.channel.sent == []
        harness.assert_phase(Phase.MAIN_MENU, NetState.IDLE)


class TestFiring:
    def test_fire_sends_attack_and_waits(self, harness):
        harness.reach_play(i_start=True)
        assert harness.fire(3, 4)
        assert harness.channel.sent_of(Attack) == [Attack(3, 4)]
        harness.assert_phase(Phase.WAITING_FOR_RESULT, NetState.WAIT_RESULT)
        assert harness.display.cells[(Side.ENEMY, 3, 4)] == CellVisual.PENDING

    def test_fire_by_button(self, harness):
        harness.reach_play(i_start=True)
        harness.tap()
        assert harness.channel.sent_of(Attack) == [Attack(5, 5)]

    def test_cannot_fire_on_enemy_turn(self, harness):
        harness.reach_play(i_start=False)
        assert not harness.fire(3, 4)
        assert harness.channel.sent_of(Attack) == []

    def test_cannot_fire_twice_at_a_cell(self, harness):
        harness.reach_play(i_start=True)
        harness.session.enemy.attacked.set(3, 4)
        assert not harness.fire(3, 4)
        harness.assert_phase(Phase.MY_TURN)

    def test_result_hit_ends_turn(self, harness):
        harness.reach_play(i_start=True)
        harness.fire(3, 4)
        harness.channel.inject(Result(3, 4, True))
        harness.run(1)
        s = harness.session
        harness.assert_phase(Phase.ENEMY_TURN, NetState.PEER_TURN)
        assert s.pending is None
        assert s.enemy.remaining == FLEET_CELLS - 1
        assert s.enemy.occupied.get(3, 4)
        assert harness.display.cells[(Side.ENEMY, 3, 4)] == CellVisual.HIT
        assert (AudioEvent.ATTACK, True) in harness.sounds.events

    def test_result_miss(self, harness):
        harness.reach_play(i_start=True)
        harness.fire(3, 4)
        harness.channel.inject(Result(3, 4, False))
        harness.run(1)
        assert harness.session.enemy.remaining == FLEET_CELLS
        assert harness.display.cells[(Side.ENEMY, 3, 4)] == CellVisual.MISS

    def test_stray_result_is_ignored(self, harness):
        harness.reach_play(i_start=True)
        harness.channel.inject(Result(3, 4, True))
        harness.run(1)
        harness.assert_phase(Phase.MY_TURN)
        assert harness.session.enemy.remaining == FLEET_CELLS

    def test_mismatched_result_is_ignored(self, harness):
        harness.reach_play(i_start=True)
        harness.fire(3, 4)
        harness.channel.inject(Result(4, 3, True))
        harness.run(1)
        harness.assert_phase(Phase.WAITING_FOR_RESULT)
        assert harness.session.enemy.remaining == FLEET_CELLS

    def test_attack_resent_until_result(self, harness):
        harness.reach_play(i_start=True)
        harness.fire(3, 4)
        harness.run(ATTACK_RESEND_TICKS * 3)
        assert harness.channel.sent_of(Attack) == [Attack(3, 4)] * 4

    def test_early_attack_returns_turn_after_result(self, harness):
        harness.reach_play(i_start=True)
        harness.fire(3, 4)
        harness.channel.inject(Attack(9, 9))
        harness.run(1)
        assert harness.channel.sent_of(Result) == [Result(9, 9, False)]
        harness.assert_phase(Phase.WAITING_FOR_RESULT)

        harness.channel.inject(Result(3, 4, False))
        harness.run(1)
        harness.assert_phase(Phase.MY_TURN, NetState.MY_TURN)


class TestIncomingAttacks:
    def test_attack_hit_gives_us_the_turn(self, harness):
        harness.reach_play(i_start=False)
        harness.channel.inject(Attack(0, 0))
        harness.run(1)
        assert harness.channel.sent_of(Result) == [Result(0, 0, True)]
        assert harness.session.own.remaining == FLEET_CELLS - 1
        harness.assert_phase(Phase.MY_TURN, NetState.MY_TURN)
        assert harness.display.cells[(Side.PLAYER, 0, 0)] == CellVisual.HIT

    def test_repeat_attack_same_result_counted_once(self, harness):
        harness.reach_play(i_start=False)
        harness.channel.inject(Attack(0, 0))
        harness.channel.inject(Attack(0, 0))
        harness.run(2)
        assert harness.channel.sent_of(Result) == [Result(0, 0, True)] * 2
        assert harness.session.own.remaining == FLEET_CELLS - 1
        harness.assert_phase(Phase.MY_TURN)

    def test_malformed_lines_are_dropped(self, harness):
        harness.reach_play(i_start=False)
        for line in ("A 10 0", "R 1 1 X", "HELLO", "", "READY -1"):
            harness.channel.inject_line(line)
        harness.run(5)
        assert harness.channel.sent_of(Result) == []
        harness.assert_phase(Phase.ENEMY_TURN)


class TestGameOver:
    def _sink_all_but_one(self, h: Harness) -> tuple[int, int]:
        s = h.session
        cells = list(s.own.occupied.cells())
        for row, col in cells[:-1]:
            s.own.mark_attacked(row, col)
        s.own.remaining = 1
        return cells[-1]

    def test_last_hit_loses(self, harness):
        harness.reach_play(i_start=False)
        row, col = self._sink_all_but_one(harness)
        harness.channel.inject(Attack(row, col))
        harness.run(1)
        harness.assert_phase(Phase.OVER, NetState.GAME_OVER)
        assert harness.session.won is False
        assert harness.display.screens[-1] == Screen.LOSE
        assert harness.sounds.events[-1] == (AudioEvent.LOSE, None)

    def test_last_result_wins(self, harness):
        harness.reach_play(i_start=True)
        harness.session.enemy.remaining = 1
        harness.fire(2, 2)
        harness.channel.inject(Result(2, 2, True))
        harness.run(1)
        harness.assert_phase(Phase.OVER)
        assert harness.session.won is True
        assert harness.display.screens[-1] == Screen.WIN

    def test_attacks_after_game_over_still_answered(self, harness):
        harness.reach_play(i_start=False)
        row, col = self._sink_all_but_one(harness)
        harness.channel.inject(Attack(row, col))
        harness.channel.inject(Attack(row, col))
        harness.run(2)
        assert harness.channel.sent_of(Result) == [Result(row, col, True)] * 2
        harness.assert_phase(Phase.OVER)

    def test_two_taps_reset(self, harness):
        harness.reach_play(i_start=True)
        harness.session.enemy.remaining = 1
        harness.fire(2, 2)
        harness.channel.inject(Result(2, 2, True))
        harness.run(1)

        harness.tap()
        harness.assert_phase(Phase.OVER)
        assert harness.display.status == "Press 2x to continue!"

        harness.tap()
        harness.assert_phase(Phase.MAIN_MENU, NetState.IDLE)
        assert harness.session.own.remaining == 0
        assert harness.session.own.fleet == []
