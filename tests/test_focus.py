"""Tests for the focused-practice controller state machine."""

from pianodrill.coach.focus import FocusedPracticeController, FocusPhase, RoundResult
from pianodrill.ledger import MistakeLedger
from pianodrill.models import Hand, SingleTarget


def _ledger_with(count: int) -> MistakeLedger:
    ledger = MistakeLedger()
    for _ in range(count):
        ledger.record_note_miss(60, Hand.RIGHT)
    return ledger


def _sequence(n: int = 2):
    return [SingleTarget(pitch=60 + 2 * i, hand=Hand.RIGHT) for i in range(n)]


def _play_round(controller: FocusedPracticeController, mistakes: int) -> RoundResult:
    result = RoundResult.CONTINUE
    for i in range(len(controller.sequence)):
        if i < mistakes:
            controller.record_mistake()
        result = controller.advance()
    return result


def _active(controller: FocusedPracticeController, n: int = 2) -> None:
    request_id = controller.check_trigger(_ledger_with(2), now=0.0)
    assert controller.receive_sequence(request_id, _sequence(n))


def test_single_mistake_never_triggers():
    controller = FocusedPracticeController()
    assert controller.check_trigger(_ledger_with(1), now=1000.0) is None
    assert controller.phase == FocusPhase.FREE


def test_two_mistakes_trigger():
    controller = FocusedPracticeController()
    assert controller.check_trigger(_ledger_with(2), now=5.0) == 1
    assert controller.phase == FocusPhase.AWAITING_SEQUENCE
    assert controller.last_trigger_at == 5.0


def test_cooldown_blocks_retrigger():
    controller = FocusedPracticeController()
    controller.check_trigger(_ledger_with(2), now=0.0)
    controller.abandon()

    assert controller.check_trigger(_ledger_with(5), now=30.0) is None
    assert controller.check_trigger(_ledger_with(5), now=119.9) is None
    assert controller.check_trigger(_ledger_with(5), now=120.0) == 2


def test_reset_clears_cooldown():
    controller = FocusedPracticeController()
    controller.check_trigger(_ledger_with(2), now=0.0)
    controller.reset()
    assert controller.check_trigger(_ledger_with(2), now=1.0) is not None


def test_no_trigger_while_busy():
    controller = FocusedPracticeController(cooldown=0.0)
    controller.check_trigger(_ledger_with(2), now=0.0)
    assert controller.check_trigger(_ledger_with(9), now=50.0) is None


def test_stale_reply_is_discarded():
    controller = FocusedPracticeController()
    first = controller.check_trigger(_ledger_with(2), now=0.0)
    controller.abandon()
    assert not controller.receive_sequence(first, _sequence())
    assert controller.phase == FocusPhase.FREE


def test_reply_for_older_request_is_ignored():
    controller = FocusedPracticeController(cooldown=0.0)
    first = controller.check_trigger(_ledger_with(2), now=0.0)
    controller.abandon()
    second = controller.check_trigger(_ledger_with(2), now=1.0)
    assert not controller.receive_sequence(first, _sequence())
    assert controller.phase == FocusPhase.AWAITING_SEQUENCE
    assert controller.receive_sequence(second, _sequence())


def test_empty_reply_returns_to_free():
    controller = FocusedPracticeController()
    request_id = controller.check_trigger(_ledger_with(2), now=0.0)
    assert not controller.receive_sequence(request_id, [])
    assert controller.phase == FocusPhase.FREE


def test_current_target_is_fresh_copy():
    controller = FocusedPracticeController()
    _active(controller)
    first = controller.current_target()
    assert first == controller.sequence[0]
    assert first is not controller.sequence[0]


def test_clean_round_is_mastered_immediately():
    controller = FocusedPracticeController()
    _active(controller, n=3)
    assert controller.advance() == RoundResult.CONTINUE
    assert controller.advance() == RoundResult.CONTINUE
    assert controller.advance() == RoundResult.MASTERED
    assert controller.phase == FocusPhase.FREE


def test_one_mistake_still_counts_as_mastered():
    controller = FocusedPracticeController()
    _active(controller)
    assert _play_round(controller, mistakes=1) == RoundResult.MASTERED


def test_replays_then_pauses_after_three_rounds():
    controller = FocusedPracticeController()
    _active(controller)

    assert _play_round(controller, mistakes=2) == RoundResult.REPLAY
    assert controller.round == 1
    assert controller.index == 0
    assert controller.mistakes_this_round == 0

    assert _play_round(controller, mistakes=2) == RoundResult.REPLAY
    assert controller.round == 2

    assert _play_round(controller, mistakes=2) == RoundResult.PAUSED
    assert controller.phase == FocusPhase.FREE
    assert controller.best_score == 2


def test_improving_round_can_master_after_replay():
    controller = FocusedPracticeController()
    _active(controller)
    assert _play_round(controller, mistakes=2) == RoundResult.REPLAY
    assert _play_round(controller, mistakes=0) == RoundResult.MASTERED
    assert controller.best_score == 0


def test_mistakes_outside_focus_are_not_counted():
    controller = FocusedPracticeController()
    controller.record_mistake()
    assert controller.mistakes_this_round == 0
