"""Tests for the SM-2 review transition."""

from datetime import timedelta

import pytest

from recallkit.application.scheduler import apply_review, calculate_next, round_half_up
from recallkit.domain.models import Difficulty


class TestCalculateNext:
    def test_again_resets_and_requeues_after_one_minute(self, make_card, now):
        card = make_card(repetitions=5, interval=40, ease_factor=2.1)
        result = calculate_next(card, Difficulty.AGAIN, now)

        assert result.repetitions == 0
        assert result.interval == 0
        assert result.ease_factor == 2.1
        assert result.requeue_delay == timedelta(minutes=1)
        assert result.next_review_date == now + timedelta(minutes=1)

    @pytest.mark.parametrize(
        "difficulty, first, second",
        [
            (Difficulty.HARD, 1, 2),
            (Difficulty.GOOD, 1, 6),
            (Difficulty.EASY, 4, 8),
        ],
    )
    def test_fixed_first_intervals(self, make_card, now, difficulty, first, second):
        r1 = calculate_next(make_card(repetitions=0, interval=1), difficulty, now)
        assert (r1.repetitions, r1.interval) == (1, first)

        r2 = calculate_next(make_card(repetitions=1, interval=first), difficulty, now)
        assert (r2.repetitions, r2.interval) == (2, second)
        assert r2.next_review_date == now + timedelta(days=second)

    def test_good_grows_by_ease_factor(self, make_card, now):
        result = calculate_next(make_card(repetitions=2, interval=6, ease_factor=2.5), Difficulty.GOOD, now)
        assert result.repetitions == 3
        assert result.interval == 15
        assert result.ease_factor == 2.5

    def test_hard_uses_reduced_ease_and_penalty(self, make_card, now):
        card = make_card(repetitions=3, interval=10, ease_factor=2.5)
        result = calculate_next(card, Difficulty.HARD, now)

        assert result.ease_factor == pytest.approx(2.35)
        # round(10 * 2.35 * 0.8) = round(18.8)
        assert result.interval == 19
        assert result.repetitions == 4

    def test_hard_interval_never_below_one_day(self, make_card, now):
        card = make_card(repetitions=4, interval=0, ease_factor=1.3)
        assert calculate_next(card, Difficulty.HARD, now).interval == 1

    def test_easy_uses_raised_ease_and_bonus(self, make_card, now):
        card = make_card(repetitions=2, interval=8, ease_factor=2.0)
        result = calculate_next(card, Difficulty.EASY, now)

        assert result.ease_factor == pytest.approx(2.1)
        # round(8 * 2.1 * 1.3) = round(21.84)
        assert result.interval == 22

    def test_ease_factor_floor_and_ceiling(self, make_card, now):
        low = calculate_next(make_card(ease_factor=1.35), Difficulty.HARD, now)
        high = calculate_next(make_card(ease_factor=2.45), Difficulty.EASY, now)
        assert low.ease_factor == 1.3
        assert high.ease_factor == 2.5

    def test_rounds_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


class TestApplyReview:
    @pytest.mark.parametrize("difficulty", list(Difficulty))
    @pytest.mark.parametrize("ease", [1.3, 1.7, 2.2, 2.5])
    def test_ease_factor_stays_in_bounds(self, make_card, now, difficulty, ease):
        card = make_card(repetitions=4, interval=20, ease_factor=ease)
        updated = apply_review(card, difficulty, 3.0, now)
        assert 1.3 <= updated.ease_factor <= 2.5

    def test_again_resets_streak(self, make_card, now):
        card = make_card(repetitions=3, interval=15, streak=3, total_reviews=3, correct_reviews=3)
        updated = apply_review(card, Difficulty.AGAIN, 2.0, now)

        assert updated.repetitions == 0
        assert updated.streak == 0
        assert updated.interval == 0
        assert updated.next_review_date - now == timedelta(minutes=1)
        assert updated.total_reviews == 4
        assert updated.correct_reviews == 3

    def test_two_good_reviews_from_new(self, make_card, now):
        card = make_card()
        first = apply_review(card, Difficulty.GOOD, 4.0, now)
        second = apply_review(first, Difficulty.GOOD, 2.0, now + timedelta(days=1))

        assert (first.repetitions, first.interval) == (1, 1)
        assert (second.repetitions, second.interval) == (2, 6)
        assert second.streak == 2
        assert second.correct_reviews == 2

    def test_repeated_easy_never_lowers_ease(self, make_card, now):
        card = make_card(ease_factor=1.8)
        for _ in range(10):
            updated = apply_review(card, Difficulty.EASY, 1.0, now)
            assert updated.ease_factor >= card.ease_factor
            card = updated
        assert card.ease_factor == 2.5

    def test_running_mean_of_response_time(self, make_card, now):
        card = make_card()
        card = apply_review(card, Difficulty.GOOD, 4.0, now)
        assert card.average_response_time == 4.0

        card = apply_review(card, Difficulty.GOOD, 8.0, now)
        assert card.average_response_time == pytest.approx(6.0)

    def test_missing_average_counts_as_zero(self, make_card, now):
        card = make_card(total_reviews=1, average_response_time=None)
        updated = apply_review(card, Difficulty.GOOD, 6.0, now)
        assert updated.average_response_time == pytest.approx(3.0)

    def test_input_card_is_not_modified(self, make_card, now):
        card = make_card()
        apply_review(card, Difficulty.EASY, 1.0, now)
        assert card.repetitions == 0
        assert card.total_reviews == 0

    def test_updated_at_is_review_time(self, make_card, now):
        assert apply_review(make_card(), Difficulty.GOOD, 1.0, now).updated_at == now
