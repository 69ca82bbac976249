from __future__ import annotations

import unittest
from datetime import date

from imergfetch.errors import InvalidRange
from imergfetch.services.calendar import iter_days, iter_months, resolve_range
from imergfetch.services.naming import build_daily_path, day_of_year_token


class CalendarTests(unittest.TestCase):
    def test_single_day_range(self) -> None:
        self.assertEqual(list(iter_days("2011-08-01", "2011-08-01")), [date(2011, 8, 1)])

    def test_range_across_year_boundary(self) -> None:
        days = list(iter_days(date(2011, 12, 28), date(2012, 1, 3)))
        self.assertEqual(len(days), 7)
        self.assertEqual(days[0], date(2011, 12, 28))
        self.assertEqual(days[-1], date(2012, 1, 3))

        paths = [build_daily_path(day) for day in days]
        self.assertEqual(len(set(paths)), 7)
        for day, path in zip(days, paths):
            self.assertIn(f"/{day:%Y}/{day:%m}/{day:%d}/gis/", path)
            self.assertIn(f".{day:%Y%m%d}-S000000-E235959.{day_of_year_token(day)}.", path)
        self.assertTrue(paths[3].endswith(".20111231-S000000-E235959.10920.V07B.tif"))
        self.assertTrue(paths[4].endswith(".20120101-S000000-E235959.0000.V07B.tif"))

    def test_backwards_range_rejected(self) -> None:
        with self.assertRaises(InvalidRange):
            resolve_range("2012-01-03", "2011-12-28")
        with self.assertRaises(InvalidRange):
            list(iter_days("2012-01-03", "2011-12-28"))

    def test_range_ending_on_last_representable_day(self) -> None:
        self.assertEqual(list(iter_days(date.max, date.max)), [date.max])
        self.assertEqual(
            list(iter_days("9999-12-30", "9999-12-31")),
            [date(9999, 12, 30), date(9999, 12, 31)],
        )
        self.assertEqual(
            list(iter_months("9999-11-20", "9999-12-31")),
            [date(9999, 11, 1), date(9999, 12, 1)],
        )

    def test_iter_months_covers_partial_months(self) -> None:
        months = list(iter_months("2011-11-15", "2012-02-01"))
        self.assertEqual(
            months,
            [date(2011, 11, 1), date(2011, 12, 1), date(2012, 1, 1), date(2012, 2, 1)],
        )


if __name__ == "__main__":
    unittest.main()
