import json

import pytest

from board import grid_from_values
from game import Session
from logger import MetricLogger, RunTotals


def test_log_to_stdout_only(capsys):
    logger = MetricLogger()
    logger.log({"score": 120, "mean": 3.14159}, step=2)
    out = capsys.readouterr().out
    assert "--- Game 2 ---" in out
    assert "  score: 120" in out
    assert "  mean: 3.14" in out
    assert logger.log_file is None
    logger.close()


def test_log_to_jsonl(tmp_path):
    with MetricLogger(log_dir=tmp_path, experiment_name="run") as logger:
        logger.log({"score": 8}, step=1, verbose=False)
        logger.log({"score": 16}, step=2, verbose=False)
        log_file = logger.log_file

    assert log_file.parent == tmp_path
    assert log_file.name.startswith("run_")
    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert [e["score"] for e in entries] == [8, 16]
    assert [e["step"] for e in entries] == [1, 2]
    assert all("timestamp" in e for e in entries)


def test_unique_log_files(tmp_path):
    with MetricLogger(log_dir=tmp_path) as first, MetricLogger(log_dir=tmp_path) as second:
        assert first.log_file != second.log_file


def test_log_game(tmp_path, capsys):
    values = [[2048, 4], [8, 0]]
    session = Session(grid=grid_from_values(values), score=3000)
    with MetricLogger(log_dir=tmp_path) as logger:
        metrics = logger.log_game(session, moves=321, step=1)

    assert metrics == {
        "score": 3000,
        "moves": 321,
        "max_tile": 2048,
        "won": True,
        "board": values,
    }
    assert "max_tile: 2048" in capsys.readouterr().out
    entry = json.loads(logger.log_file.read_text())
    assert entry["won"] is True
    assert entry["board"] == values


def test_log_summary_aggregates_games(tmp_path):
    won = Session(grid=grid_from_values([[2048, 4], [8, 0]]), score=3000)
    lost = Session(grid=grid_from_values([[2, 4], [4, 2]]), score=1000)
    with MetricLogger(log_dir=tmp_path) as logger:
        logger.log_game(won, moves=300, step=1, verbose=False)
        logger.log_game(lost, moves=100, step=2, verbose=False)
        summary = logger.log_summary(verbose=False)

    assert summary == {
        "games": 2,
        "mean_score": 2000.0,
        "best_score": 3000,
        "best_tile": 2048,
        "mean_moves": 200.0,
        "win_rate": 0.5,
    }
    last = json.loads(logger.log_file.read_text().splitlines()[-1])
    assert last["win_rate"] == pytest.approx(0.5)


def test_empty_totals():
    assert RunTotals().summary()["mean_score"] == 0.0
