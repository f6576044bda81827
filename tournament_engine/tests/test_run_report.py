"""
Tests for the text report CLI.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tournament_engine.run_report import run


def test_report_prints_table_scenarios_and_forecast(data_dir, capsys):
    run(data_dir, team_id="b")
    out = capsys.readouterr().out
    assert "GROUP A  round 3  in progress" in out
    assert "Next round scenarios for b:" in out
    assert "Season forecast:" in out
    lines = [line for line in out.splitlines() if line.strip().startswith("1  ")]
    assert lines and "C" in lines[0]


def test_report_rejects_unknown_group_and_team(data_dir):
    with pytest.raises(SystemExit):
        run(data_dir, group_id="Z")
    with pytest.raises(SystemExit):
        run(data_dir, team_id="x")


def test_report_without_groups(tmp_path):
    with pytest.raises(SystemExit):
        run(tmp_path)
