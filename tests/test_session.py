import unittest
from decimal import Decimal

from costchart.application.services.import_service import UploadedFile
from costchart.application.services.session import CostSession
from costchart.domain.enums import AggregationMode, Dimension
from costchart.domain.errors import ValidationError


def _upload(name: str, *rows: str) -> UploadedFile:
    return UploadedFile(name=name, content="\n".join(["product_name,cost", *rows]) + "\n")


class TestCostSession(unittest.TestCase):
    def setUp(self) -> None:
        self.session = CostSession()
        self.session.import_files(
            [
                _upload("monthly-report-2024-05-111.csv", "EC2,$10", "S3,$1"),
                _upload("monthly-report-2024-05-222.csv", "EC2,$5"),
                _upload("monthly-report-2024-06-111.csv", "EC2,$7"),
            ]
        )

    def test_first_upload_selects_everything(self) -> None:
        filters = self.session.filters
        self.assertEqual(filters.accounts.selected, ("111", "222"))
        self.assertEqual(filters.months.selected, ("2024-05", "2024-06"))
        self.assertEqual(set(filters.services.selected), {"EC2", "S3"})
        self.assertEqual(self.session.grand_total(), Decimal("23"))

    def test_later_uploads_keep_user_choices(self) -> None:
        self.session.toggle(Dimension.ACCOUNTS, "222")
        self.session.import_files([_upload("monthly-report-2024-07-333.csv", "Lambda,$2")])
        filters = self.session.filters
        self.assertEqual(filters.accounts.selected, ("111",))
        self.assertNotIn("2024-07", filters.months.selected)
        self.assertIn("2024-07", self.session.universe(Dimension.MONTHS))

    def test_empty_selection_zeroes_total(self) -> None:
        for dim in Dimension:
            with self.subTest(dim=dim):
                session = CostSession()
                session.import_files([_upload("monthly-report-2024-05-111.csv", "EC2,1")])
                session.clear_selection(dim)
                self.assertEqual(session.grand_total(), Decimal(0))

    def test_clear_resets_universes_and_selections(self) -> None:
        self.session.set_mode("account")
        self.session.clear()
        universes = self.session.universes()
        self.assertTrue(all(values == [] for values in universes.values()))
        for dim in Dimension:
            self.assertEqual(self.session.filters.get(dim).selected, ())
        self.assertEqual(self.session.filters.mode, AggregationMode.SERVICE)
        self.assertEqual(self.session.chart().rows, [])

        self.session.import_files([_upload("monthly-report-2025-01-999.csv", "EC2,1")])
        self.assertEqual(self.session.filters.accounts.selected, ("999",))

    def test_toggle_unknown_key_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.session.toggle(Dimension.ACCOUNTS, "nope")

    def test_select_top_and_all(self) -> None:
        self.session.clear_selection(Dimension.SERVICES)
        self.session.select_top(1)
        self.assertEqual(self.session.filters.services.selected, ("EC2",))
        self.session.select_all(Dimension.SERVICES)
        self.assertEqual(self.session.filters.services.selected, ("EC2", "S3"))

    def test_reupload_drops_vanished_service_from_selection(self) -> None:
        self.session.import_files([_upload("monthly-report-2024-05-111.csv", "EC2,$10")])
        self.assertEqual(self.session.filters.services.selected, ("EC2",))
        self.assertEqual(len(self.session.store.reports("2024-05")), 2)

    def test_views_are_memoized_per_version_and_filters(self) -> None:
        first = self.session.chart()
        self.assertIs(self.session.chart(), first)
        self.session.toggle(Dimension.MONTHS, "2024-06")
        toggled = self.session.chart()
        self.assertIsNot(toggled, first)
        self.assertEqual([r.month for r in toggled.rows], ["2024-05"])
        self.session.import_files([_upload("monthly-report-2024-05-222.csv", "EC2,$6")])
        self.assertEqual(self.session.chart().rows[0].series["EC2"], Decimal("16"))

    def test_summary(self) -> None:
        summary = self.session.summary()
        self.assertEqual(summary["months"], 2)
        self.assertEqual(summary["accounts"], 2)
        self.assertEqual(summary["services"], 2)
        self.assertEqual(summary["reports"], 3)
        self.assertEqual(summary["grand_total"], 23.0)

    def test_search_does_not_change_selection(self) -> None:
        before = self.session.filters.accounts.selected
        self.session.set_search(Dimension.ACCOUNTS, "2")
        payload = self.session.filters_payload()
        self.assertEqual(payload["accounts"]["visible"], ["222"])
        self.assertEqual(self.session.filters.accounts.selected, before)


if __name__ == "__main__":
    unittest.main()
