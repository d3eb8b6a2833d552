"""Tests for the withdrawal countdown, eligibility tracker and amount entry."""

from decimal import Decimal

import pytest

from yieldramp.lulo.amount import AmountEntry
from yieldramp.lulo.contracts import PendingWithdrawal
from yieldramp.lulo.countdown import (
    MATURATION_WINDOW_SECONDS,
    Countdown,
    EligibilityTracker,
    get_withdraw_countdown,
)

from conftest import NOW


def make_withdrawal(withdrawal_id=1, age_seconds=0.0, native_amount=5_000_000):
    return PendingWithdrawal(
        withdrawal_id=withdrawal_id,
        native_amount=native_amount,
        created_timestamp=NOW - age_seconds,
    )


class TestWithdrawCountdown:
    """Tests for get_withdraw_countdown."""

    def test_window_is_one_day(self):
        assert MATURATION_WINDOW_SECONDS == 86400

    def test_eligible_exactly_at_window(self):
        countdown = get_withdraw_countdown(make_withdrawal(age_seconds=86400), now=NOW)

        assert countdown == Countdown(total=0, text=None)
        assert countdown.is_ready

    def test_eligible_after_window(self):
        countdown = get_withdraw_countdown(make_withdrawal(age_seconds=90000), now=NOW)

        assert countdown == Countdown(total=0, text=None)

    def test_one_hour_old(self):
        countdown = get_withdraw_countdown(make_withdrawal(age_seconds=3600), now=NOW)

        assert countdown.total == 82800
        assert countdown.text == "23h 0m remaining"

    def test_minutes_are_floored(self):
        countdown = get_withdraw_countdown(make_withdrawal(age_seconds=3600 + 90), now=NOW)

        assert countdown.text == "22h 58m remaining"

    def test_last_minute(self):
        countdown = get_withdraw_countdown(make_withdrawal(age_seconds=86400 - 30), now=NOW)

        assert countdown.text == "0h 0m remaining"
        assert not countdown.is_ready

    def test_missing_withdrawal(self):
        assert get_withdraw_countdown(None, now=NOW) == Countdown(total=-1, text=None)

    def test_custom_window(self):
        countdown = get_withdraw_countdown(make_withdrawal(age_seconds=60), now=NOW, window=3660)

        assert countdown.text == "1h 0m remaining"


class TestEligibilityTracker:
    """Tests for the one-shot eligibility prompt."""

    def test_fires_once_across_ticks(self):
        tracker = EligibilityTracker()
        withdrawals = [make_withdrawal(age_seconds=90000)]

        fired = [tracker.check(withdrawals, now=NOW + i) for i in range(10)]

        assert fired[0] is withdrawals[0]
        assert fired[1:] == [None] * 9

    def test_not_fired_while_maturing(self):
        tracker = EligibilityTracker()
        withdrawals = [make_withdrawal(age_seconds=3600)]

        assert tracker.check(withdrawals, now=NOW) is None
        assert not tracker.fired

    def test_fires_when_window_elapses(self):
        tracker = EligibilityTracker()
        withdrawals = [make_withdrawal(age_seconds=86000)]

        assert tracker.check(withdrawals, now=NOW) is None
        assert tracker.check(withdrawals, now=NOW + 400) is withdrawals[0]
        assert tracker.check(withdrawals, now=NOW + 800) is None

    def test_only_first_withdrawal_counts(self):
        tracker = EligibilityTracker()
        withdrawals = [make_withdrawal(1, age_seconds=10), make_withdrawal(2, age_seconds=90000)]

        assert tracker.check(withdrawals, now=NOW) is None

    def test_empty_list(self):
        assert EligibilityTracker().check([], now=NOW) is None

    def test_reset_rearms(self):
        tracker = EligibilityTracker()
        withdrawals = [make_withdrawal(age_seconds=90000)]
        tracker.check(withdrawals, now=NOW)

        tracker.reset()

        assert tracker.check(withdrawals, now=NOW) is withdrawals[0]

    def test_composition_change_rearms(self):
        tracker = EligibilityTracker()
        first = make_withdrawal(1, age_seconds=90000)
        tracker.check([first], now=NOW)

        assert tracker.check([first], now=NOW) is None
        assert tracker.check([first, make_withdrawal(2)], now=NOW) is first

    def test_refetch_with_same_ids_does_not_rearm(self):
        tracker = EligibilityTracker()
        tracker.check([make_withdrawal(1, age_seconds=90000)], now=NOW)

        assert tracker.check([make_withdrawal(1, age_seconds=90000)], now=NOW) is None


class TestAmountEntry:
    """Tests for keypad amount entry."""

    def type_keys(self, keys, entry=None):
        entry = entry or AmountEntry()
        for key in keys:
            entry.press(key)
        return entry.text

    def test_digits_append(self):
        assert self.type_keys("125") == "125"

    def test_single_decimal_point(self):
        assert self.type_keys("1..5.") == "1.5"

    def test_two_fraction_digits_max(self):
        assert self.type_keys("3.14159") == "3.14"

    def test_leading_dot_gets_zero(self):
        assert self.type_keys(".5") == "0.5"

    def test_leading_zero_collapses(self):
        assert self.type_keys("07") == "7"
        assert self.type_keys("0.7") == "0.7"

    def test_delete(self):
        entry = AmountEntry("12.3")
        entry.press("delete")
        assert entry.text == "12."
        entry.press("delete")
        entry.press("delete")
        entry.press("delete")
        entry.press("delete")
        assert entry.text == ""

    def test_rejects_unknown_key(self):
        with pytest.raises(ValueError):
            AmountEntry().press("x")

    def test_percentage_rounds_to_cents(self):
        entry = AmountEntry()

        assert entry.select_percentage(Decimal("250.75"), 0.5) == "125.38"
        assert entry.slider_value == 0.5
        assert entry.select_percentage(Decimal("99.999"), 1) == "100.00"

    def test_percentage_without_balance_is_noop(self):
        entry = AmountEntry("5")

        assert entry.select_percentage(None, 0.25) == "5"
        assert entry.slider_value == 0.0
