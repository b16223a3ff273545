import contextlib
import io
import tempfile
import unittest
from pathlib import Path

import pandas as pd

from costchart.cli import main


def _write(root: Path, name: str, *rows: str) -> Path:
    path = root / name
    path.write_text("\n".join(["product_name,cost", *rows]) + "\n", encoding="utf-8")
    return path


class TestSummarize(unittest.TestCase):
    def test_prints_table_and_writes_csv(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            a = _write(root, "monthly-report-2024-05-111.csv", "EC2,$10", "S3,$0.5")
            b = _write(root, "monthly-report-2024-06-111.csv", "EC2,$7")
            out = root / "out" / "chart.csv"
            stdout = io.StringIO()
            with contextlib.redirect_stdout(stdout):
                code = main(["summarize", str(a), str(b), "--csv", str(out)])
            self.assertEqual(code, 0)
            self.assertIn("total: 17.50", stdout.getvalue())

            frame = pd.read_csv(out, index_col="month")
            self.assertEqual(list(frame.index), ["2024-05", "2024-06"])
            self.assertEqual(frame.loc["2024-06", "S3"], 0.0)
            self.assertEqual(frame.loc["2024-05", "EC2"], 10.0)

    def test_account_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            a = _write(root, "monthly-report-2024-05-111.csv", "EC2,$10")
            b = _write(root, "monthly-report-2024-05-222.csv", "EC2,$3")
            out = root / "chart.csv"
            with contextlib.redirect_stdout(io.StringIO()):
                code = main(["summarize", str(a), str(b), "--mode", "account", "--csv", str(out)])
            self.assertEqual(code, 0)
            frame = pd.read_csv(out, index_col="month", dtype={"month": str})
            self.assertEqual([str(c) for c in frame.columns], ["111", "222"])

    def test_all_files_failing_returns_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            bad = _write(root, "report-2024-05.csv", "EC2,1")
            stderr = io.StringIO()
            with contextlib.redirect_stderr(stderr), contextlib.redirect_stdout(io.StringIO()):
                code = main(["summarize", str(bad), str(root / "missing.csv")])
            self.assertEqual(code, 1)
            self.assertIn("report-2024-05.csv", stderr.getvalue())
            self.assertIn("missing.csv", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
