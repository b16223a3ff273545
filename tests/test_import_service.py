import unittest
from decimal import Decimal

from costchart.application.services.import_service import UploadedFile, import_files
from costchart.application.services.report_store import ReportStore


def _upload(name: str, *rows: str, header: str = "product_name,cost") -> UploadedFile:
    return UploadedFile(name=name, content=("\n".join([header, *rows]) + "\n").encode("utf-8"))


class TestImportFiles(unittest.TestCase):
    def test_partial_failure_commits_successes(self) -> None:
        store = ReportStore()
        result = import_files(
            store,
            [
                _upload("monthly-report-2024-05-111.csv", "EC2,$10.00"),
                _upload("report-2024-05.csv", "EC2,1"),
                UploadedFile(name="monthly-report-2024-06-111.csv", content=b"\xff\xfe\x00"),
                _upload("monthly-report-2024-07-111.csv", "S3,1"),
            ],
        )
        self.assertEqual(
            result.imported, ["monthly-report-2024-05-111.csv", "monthly-report-2024-07-111.csv"]
        )
        self.assertEqual(len(result.errors), 2)
        self.assertIn("report-2024-05.csv", result.errors[0])
        self.assertIn("monthly-report-2024-06-111.csv", result.errors[1])
        self.assertFalse(result.ok)
        self.assertEqual(store.months(), ["2024-05", "2024-07"])
        self.assertEqual(result.months, ["2024-05", "2024-07"])

    def test_reupload_replaces(self) -> None:
        store = ReportStore()
        import_files(store, [_upload("monthly-report-2024-05-111.csv", "EC2,1")])
        result = import_files(store, [_upload("monthly-report-2024-05-111.csv", "EC2,3")])
        self.assertEqual(result.replaced, ["monthly-report-2024-05-111.csv"])
        self.assertEqual(len(store.reports("2024-05")), 1)
        self.assertEqual(store.reports("2024-05")[0].total, Decimal("3"))

    def test_two_accounts_same_month(self) -> None:
        store = ReportStore()
        result = import_files(
            store,
            [
                _upload("monthly-report-2024-05-111.csv", "EC2,1"),
                _upload("monthly-report-2024-05-222.csv", "EC2,2"),
            ],
        )
        self.assertTrue(result.ok)
        self.assertEqual([r.key for r in store.reports("2024-05")], ["111", "222"])

    def test_batch_warnings_are_capped(self) -> None:
        store = ReportStore()
        files = [
            _upload(f"monthly-report-2024-0{i}-1.csv", "EC2,1,x", "S3,1,x", "RDS,1,x")
            for i in range(1, 4)
        ]
        result = import_files(store, files, max_warnings=5)
        self.assertEqual(len(result.warnings), 5)
        self.assertTrue(result.warnings[0].startswith("monthly-report-2024-01-1.csv row 2:"))
        self.assertEqual(len(store), 3)

    def test_empty_batch(self) -> None:
        store = ReportStore()
        result = import_files(store, [])
        self.assertEqual(result.imported, [])
        self.assertEqual(result.errors, [])
        self.assertEqual(store.version, 0)

    def test_payload(self) -> None:
        result = import_files(ReportStore(), [_upload("x.csv", "EC2,1")])
        payload = result.to_payload()
        self.assertEqual(payload["imported"], [])
        self.assertEqual(len(payload["errors"]), 1)


if __name__ == "__main__":
    unittest.main()
