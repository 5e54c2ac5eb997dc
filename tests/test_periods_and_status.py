from datetime import date
from decimal import Decimal

import pytest

from rentcore_backend.errors import ValidationError
from rentcore_backend.services.periods import Period, iter_periods, periods_of_year
from rentcore_backend.services.status import PaymentStatus, derive_status, pending_amount, severity, to_money


class TestPeriod:
    def test_label_format(self):
        assert Period(2026, 2).label == "Feb-2026"
        assert str(Period(2025, 12)) == "Dec-2025"
        assert Period(2026, 2).iso == "2026-02"

    @pytest.mark.parametrize("text", ["Feb-2026", "feb-2026", "2026-02", "2026-2", " Feb-2026 "])
    def test_parse_accepts_label_and_iso_month(self, text):
        assert Period.parse(text) == Period(2026, 2)

    @pytest.mark.parametrize("text", [None, "", "   ", "February 2026", "Foo-2026", "2026-13", "2026/02"])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(ValidationError) as exc:
            Period.parse(text)
        assert exc.value.code == "invalid_period"

    def test_next_rolls_over_the_year(self):
        assert Period(2026, 12).next() == Period(2027, 1)
        assert Period(2026, 1).shift(-1) == Period(2025, 12)
        assert Period(2026, 3).shift(14) == Period(2027, 5)

    def test_ordering_is_chronological(self):
        periods = [Period(2027, 1), Period(2026, 12), Period(2026, 2)]
        assert sorted(periods) == [Period(2026, 2), Period(2026, 12), Period(2027, 1)]

    def test_current_uses_given_day(self):
        assert Period.current(today=date(2026, 2, 28)) == Period(2026, 2)

    def test_iter_periods(self):
        labels = [p.label for p in iter_periods(Period(2026, 11), 3)]
        assert labels == ["Nov-2026", "Dec-2026", "Jan-2027"]
        assert len(periods_of_year(2026)) == 12


class TestDeriveStatus:
    @pytest.mark.parametrize("expected,collected,status", [
        (5000, 5000, PaymentStatus.PAID),
        (5000, 6000, PaymentStatus.PAID),
        (5000, 4999.99, PaymentStatus.PARTIAL),
        (5000, 1, PaymentStatus.PARTIAL),
        (5000, 0, PaymentStatus.UNPAID),
        (0, 0, PaymentStatus.NO_RENT_DUE),
        (0, 100, PaymentStatus.NO_RENT_DUE),
    ])
    def test_rules(self, expected, collected, status):
        assert derive_status(expected, collected) is status

    def test_accepts_strings_and_decimals(self):
        assert derive_status("5000.00", Decimal("2500")) is PaymentStatus.PARTIAL

    def test_severity_order(self):
        assert severity("unpaid") > severity("partial") > severity("paid") > severity("no rent due")

    def test_pending_never_negative(self):
        assert pending_amount(5000, 7000) == Decimal("0.00")
        assert pending_amount(5000, 1200) == Decimal("3800.00")

    def test_to_money_quantizes(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(None) == Decimal("0.00")
