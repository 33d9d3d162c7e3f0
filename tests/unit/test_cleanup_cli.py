"""Tests for the manual cleanup CLI."""

import os
import time

from scripts.cleanup import build_parser, main


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.dry_run is False
    assert args.max_age_hours is None
    assert args.temp_dir is None


def test_dry_run_reports_without_deleting(tmp_path, capsys):
    stale = tmp_path / "old.pdf"
    stale.write_bytes(b"%PDF")
    old = time.time() - 5 * 3600
    os.utime(stale, (old, old))

    code = main(["--dry-run", "--temp-dir", str(tmp_path), "--max-age-hours", "2"])

    assert code == 0
    assert "DRY RUN" in capsys.readouterr().out
    assert stale.exists()


def test_zero_age_removes_everything(tmp_path):
    past = time.time() - 1
    for name in ("a.pdf", "b.pdf"):
        (tmp_path / name).write_bytes(b"%PDF")
        os.utime(tmp_path / name, (past, past))

    code = main(["--temp-dir", str(tmp_path), "--max-age-hours", "0"])

    assert code == 0
    assert list(tmp_path.glob("*.pdf")) == []
