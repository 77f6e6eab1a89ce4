import re
from datetime import date

import pytest

from storefront.order import timeline as progress
from storefront.order.delivery import add_business_days, delivery_window, estimated_delivery
from storefront.order.numbering import generate_order_number, unique_order_number


class TestBusinessDays:
    def test_friday_skips_weekend(self):
        friday = date(2026, 3, 6)
        assert add_business_days(friday, 1) == date(2026, 3, 9)

    def test_window_from_wednesday(self):
        wednesday = date(2026, 3, 4)
        assert delivery_window(wednesday) == "March 9, 2026 - March 11, 2026"
        assert estimated_delivery(wednesday) == date(2026, 3, 10)

    def test_saturday_start(self):
        saturday = date(2026, 3, 7)
        assert add_business_days(saturday, 3) == date(2026, 3, 11)


class TestOrderNumbers:
    def test_format(self):
        number = generate_order_number(prefix="ord", today=date(2026, 3, 14))
        assert re.fullmatch(r"ORD-20260314-[A-Z0-9]{6}", number)

    def test_retries_until_free(self):
        taken = []

        def is_taken(candidate):
            taken.append(candidate)
            return len(taken) < 3

        number = unique_order_number(is_taken)
        assert number == taken[-1]
        assert len(taken) == 3

    def test_gives_up(self):
        with pytest.raises(RuntimeError):
            unique_order_number(lambda candidate: True, attempts=2)


class TestTimeline:
    def test_append_demotes_current(self):
        raw = progress.append(None, "First", "one")
        raw = progress.append(raw, "Second", "two")

        events = progress.load(raw)
        assert [e["status"] for e in events] == ["complete", "current"]

    def test_terminal_entry_leaves_nothing_current(self):
        raw = progress.append(None, "First", "one")
        raw = progress.append(raw, "Done", "finished", terminal=True)

        assert progress.current(raw) is None
        assert all(e["status"] == "complete" for e in progress.load(raw))
