import random

import pytest

from reflexboard.services.games import ManualScheduler, ReactionGame, reaction_message
from reflexboard.services.games import reaction


class RecordingSounds:
    def __init__(self):
        self.played = []

    def play(self, sound_id):
        self.played.append(sound_id)


@pytest.fixture()
def manual():
    return ManualScheduler()


@pytest.fixture()
def sounds():
    return RecordingSounds()


@pytest.fixture()
def game(manual, sounds):
    return ReactionGame(manual, sound_player=sounds, rng=random.Random(7))


def fire_trigger(game, manual):
    deadline = manual.next_deadline()
    assert deadline is not None
    manual.advance_to(deadline)
    assert game.state == reaction.TRIGGER


@pytest.mark.parametrize('ms, expected', [
    (0, "Superhuman! Are you a robot? 🤖"),
    (149, "Superhuman! Are you a robot? 🤖"),
    (150, "Lightning fast! ⚡"),
    (199, "Lightning fast! ⚡"),
    (220, "Incredible reflexes! 🔥"),
    (299, "Very quick! 💨"),
    (349, "Nice reaction! 👍"),
    (399, "Good job! 😊"),
    (499, "Not bad! Keep practicing 💪"),
    (500, "Room for improvement! Try again 🎯"),
    (2000, "Room for improvement! Try again 🎯"),
])
def test_reaction_messages(ms, expected):
    assert reaction_message(ms) == expected


def test_starts_idle(game):
    assert game.state == reaction.IDLE
    assert game.stimulus_at is None
    assert game.last_result is None
    assert not game.has_pending_timer


def test_start_schedules_one_timer_in_range(game, manual):
    game.start()
    assert game.state == reaction.WAITING
    assert len(manual.pending) == 1
    assert 1500 <= manual.next_deadline() <= 4000


def test_delay_is_drawn_from_configured_range(manual):
    for seed in range(20):
        manual = ManualScheduler()
        game = ReactionGame(manual, rng=random.Random(seed), delay_range_ms=(1500, 4000))
        game.start()
        assert 1500 <= manual.next_deadline() <= 4000


def test_early_click(game, manual, sounds):
    game.start()
    manual.advance(500)
    assert game.state == reaction.WAITING
    assert game.click() is None
    assert game.state == reaction.EARLY
    assert game.last_result is None
    assert game.stimulus_at is None
    # The cancelled timer never fires
    manual.advance(5000)
    assert game.state == reaction.EARLY
    assert sounds.played == ['click', 'early']


def test_trigger_then_click_measures_reaction(game, manual, sounds):
    game.start()
    fire_trigger(game, manual)
    assert game.stimulus_at == manual.now()
    manual.advance(220)
    result = game.click()
    assert game.state == reaction.RESULT
    assert result.reaction_time_ms == 220
    assert result.message.startswith("Incredible reflexes!")
    assert game.last_result == result
    assert sounds.played == ['click', 'trigger', 'success']


def test_reaction_time_rounds_to_nearest_ms(game, manual):
    game.start()
    fire_trigger(game, manual)
    manual.advance(180.6)
    assert game.click().reaction_time_ms == 181


def test_uses_injected_clock_not_scheduler_time():
    manual = ManualScheduler()
    ticks = iter([1000.0, 1333.4])
    game = ReactionGame(manual, clock=lambda: next(ticks))
    game.start()
    manual.advance(4000)
    assert game.stimulus_at == 1000.0
    assert game.click().reaction_time_ms == 333


def test_clicks_in_idle_and_result_are_ignored(game, manual):
    assert game.click() is None
    assert game.state == reaction.IDLE

    game.start()
    fire_trigger(game, manual)
    manual.advance(300)
    first = game.click()
    manual.advance(1000)
    assert game.click() is None
    assert game.state == reaction.RESULT
    assert game.last_result == first


def test_acknowledge_early_returns_to_idle(game):
    game.start()
    game.click()
    game.acknowledge()
    assert game.state == reaction.IDLE
    assert game.last_result is None


def test_acknowledge_outside_early_is_noop(game, manual):
    game.start()
    game.acknowledge()
    assert game.state == reaction.WAITING
    fire_trigger(game, manual)


@pytest.mark.parametrize('setup', ['waiting', 'trigger', 'result', 'early'])
def test_reset_from_any_state(game, manual, setup):
    game.start()
    if setup in ('trigger', 'result'):
        fire_trigger(game, manual)
    if setup == 'result':
        manual.advance(250)
        game.click()
    if setup == 'early':
        game.click()
    game.reset()
    assert game.state == reaction.IDLE
    assert game.last_result is None
    assert game.stimulus_at is None
    assert not game.has_pending_timer
    manual.advance(10000)
    assert game.state == reaction.IDLE


def test_restart_cancels_previous_timer(game, manual):
    game.start()
    first = game._pending
    manual.advance(1000)
    game.start()
    assert first.cancelled
    assert len(manual.pending) == 1
    second_deadline = manual.next_deadline()
    assert 2500 <= second_deadline <= 5000
    manual.advance_to(second_deadline - 1)
    assert game.state == reaction.WAITING
    manual.advance(2)
    assert game.state == reaction.TRIGGER
    assert game.stimulus_at == second_deadline


def test_stale_timer_is_ignored(game, manual):
    game.start()
    stale = game._pending
    game.reset()
    # Even if a cancelled handle's callback somehow ran, the session stays put
    game._on_timer(stale)
    assert game.state == reaction.IDLE
    assert game.stimulus_at is None


def test_cancel_is_idempotent(manual):
    calls = []
    handle = manual.after(100, lambda: calls.append(1))
    handle.cancel()
    handle.cancel()
    manual.advance(200)
    assert calls == []
    fired = manual.after(100, lambda: calls.append(2))
    manual.advance(100)
    fired.cancel()
    fired.cancel()
    assert calls == [2]
    assert fired.fired and fired.cancelled


def test_stimulus_set_only_in_trigger_and_result(game, manual):
    seen = []
    game.listener = lambda snap: seen.append((game.state, game.stimulus_at is not None))
    game.start()
    fire_trigger(game, manual)
    manual.advance(400)
    game.click()
    game.reset()
    game.start()
    game.click()
    game.acknowledge()
    for state, has_stimulus in seen:
        assert has_stimulus == (state in (reaction.TRIGGER, reaction.RESULT))


def test_listener_receives_snapshots(game, manual):
    snapshots = []
    game.listener = snapshots.append
    game.start()
    fire_trigger(game, manual)
    manual.advance(199)
    game.click()
    assert [s['state'] for s in snapshots] == ['waiting', 'trigger', 'result']
    assert snapshots[-1]['reaction_time'] == 199
    assert snapshots[-1]['message'] == "Lightning fast! ⚡"
    assert snapshots[0]['reaction_time'] is None


def test_sound_toggle(game, manual, sounds):
    game.set_sound_enabled(False)
    game.start()
    fire_trigger(game, manual)
    game.click()
    assert sounds.played == []
    assert game.snapshot()['sound_enabled'] is False


def test_close_cancels_pending_timer(game, manual):
    game.start()
    game.close()
    manual.advance(5000)
    assert game.state == reaction.WAITING
    assert manual.pending == []
