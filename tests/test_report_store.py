import unittest
from decimal import Decimal

from costchart.application.services.report_store import ReportStore
from costchart.domain.models.report import MonthlyReport


def _report(month: str, account: str | None, services: dict[str, str], file_name: str = "") -> MonthlyReport:
    name = file_name or f"monthly-report-{month}-{account or 'x'}.csv"
    return MonthlyReport(
        month=month,
        file_name=name,
        services={k: Decimal(v) for k, v in services.items()},
        account_id=account,
    )


class TestReportStore(unittest.TestCase):
    def test_upsert_same_key_replaces_in_place(self) -> None:
        store = ReportStore()
        self.assertFalse(store.upsert(_report("2024-05", "111", {"EC2": "1"})))
        self.assertFalse(store.upsert(_report("2024-05", "222", {"EC2": "2"})))
        self.assertTrue(store.upsert(_report("2024-05", "111", {"S3": "9"})))

        reports = store.reports("2024-05")
        self.assertEqual(len(reports), 2)
        self.assertEqual([r.key for r in reports], ["111", "222"])
        self.assertEqual(dict(reports[0].services), {"S3": Decimal("9")})
        self.assertEqual(len(store), 2)

    def test_same_account_in_other_month_is_separate(self) -> None:
        store = ReportStore()
        store.upsert(_report("2024-05", "111", {"EC2": "1"}))
        store.upsert(_report("2024-04", "111", {"EC2": "1"}))
        self.assertEqual(store.months(), ["2024-04", "2024-05"])
        self.assertEqual(store.accounts(), ["111"])

    def test_file_name_identity_when_account_missing(self) -> None:
        store = ReportStore()
        store.upsert(_report("2024-05", None, {"EC2": "1"}, file_name="monthly-report-2024-05.csv"))
        store.upsert(_report("2024-05", None, {"EC2": "3"}, file_name="monthly-report-2024-05.csv"))
        store.upsert(_report("2024-05", None, {"EC2": "5"}, file_name="monthly-report-2024-05-a.csv"))
        self.assertEqual(len(store.reports("2024-05")), 2)
        self.assertEqual(
            store.accounts(), ["monthly-report-2024-05-a.csv", "monthly-report-2024-05.csv"]
        )

    def test_services_keep_encounter_order(self) -> None:
        store = ReportStore()
        store.upsert(_report("2024-06", "1", {"Lambda": "1", "EC2": "2"}))
        store.upsert(_report("2024-05", "1", {"S3": "1", "EC2": "2"}))
        self.assertEqual(store.services(), ["S3", "EC2", "Lambda"])

    def test_clear_resets_everything_and_bumps_version(self) -> None:
        store = ReportStore()
        store.upsert(_report("2024-05", "1", {"EC2": "1"}))
        version = store.version
        store.clear()
        self.assertGreater(store.version, version)
        self.assertEqual(store.months(), [])
        self.assertEqual(store.accounts(), [])
        self.assertEqual(store.services(), [])
        self.assertEqual(len(store), 0)

    def test_payload_is_json_friendly(self) -> None:
        store = ReportStore()
        store.upsert(_report("2024-05", "1", {"EC2": "1.5"}))
        payload = store.to_payload()
        self.assertEqual(payload["months"], ["2024-05"])
        entry = payload["reports"]["2024-05"][0]
        self.assertEqual(entry["services"], {"EC2": 1.5})
        self.assertEqual(entry["total"], 1.5)
        self.assertEqual(entry["key"], "1")


if __name__ == "__main__":
    unittest.main()
