"""Stat logging for played games."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from board import grid_to_values
from game import Session, is_complete, max_tile


@dataclass
class RunTotals:
    """Aggregates over every game logged so far."""

    scores: list[int] = field(default_factory=list)
    wins: int = 0
    best_tile: int = 0
    moves: int = 0

    def add(self, score: int, won: bool, tile: int, moves: int) -> None:
        self.scores.append(score)
        self.wins += int(won)
        self.best_tile = max(self.best_tile, tile)
        self.moves += moves

    def summary(self) -> dict[str, Any]:
        games = len(self.scores)
        return {
            "games": games,
            "mean_score": sum(self.scores) / games if games else 0.0,
            "best_score": max(self.scores, default=0),
            "best_tile": self.best_tile,
            "mean_moves": self.moves / games if games else 0.0,
            "win_rate": self.wins / games if games else 0.0,
        }


class MetricLogger:
    """
    Logs finished games to stdout ("  key: value" lines) and, if log_dir is
    given, to a JSONL file with one object per game plus a final summary.

    Usage:
        with MetricLogger(log_dir="./logs", experiment_name="simulate") as logger:
            for i, (session, moves) in enumerate(games, start=1):
                logger.log_game(session, moves, step=i)
            logger.log_summary()

        # output:
        # --- Game 1 ---
        #   score: 1234
        #   moves: 210
        #   max_tile: 128
        #   won: False
        #   board: [[0, 2, 4, 8], ...]
    """

    def __init__(
        self,
        log_dir: str | Path | None = None,
        experiment_name: str = "games",
    ):
        self.totals = RunTotals()
        self.log_file = None
        self._file_handle = None

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self._get_unique_filename(log_dir, experiment_name)
            self._file_handle = open(self.log_file, "a")
            typer.echo(f"Logging to: {self.log_file}")

    @staticmethod
    def _get_unique_filename(log_dir: Path, base_name: str) -> Path:
        """<base_name>_<YYYYMMDD>_<NNN>.jsonl, with NNN the first unused suffix."""
        timestamp = datetime.now().strftime("%Y%m%d")
        suffix = 1
        while (log_dir / f"{base_name}_{timestamp}_{suffix:03d}.jsonl").exists():
            suffix += 1
        return log_dir / f"{base_name}_{timestamp}_{suffix:03d}.jsonl"

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, float):
            return f"{value:.2f}"
        return str(value)

    def log(
        self,
        metrics: dict[str, Any],
        step: int | None = None,
        header: str | None = None,
        verbose: bool = True,
    ) -> None:
        """
        Write one record.

        Args:
            metrics: Dictionary of metric name -> value.
            step: Optional game number, also used for the default header "--- Game {step} ---".
            header: Optional header line printed before the metrics.
            verbose: If False, only write to the file.
        """
        if verbose:
            if header is None and step is not None:
                header = f"--- Game {step} ---"
            if header is not None:
                typer.echo(header)
            for key, value in metrics.items():
                typer.echo(f"  {key}: {self._format_value(value)}")

        if self._file_handle is not None:
            entry = {"step": step, "timestamp": datetime.now().isoformat(), **metrics}
            self._file_handle.write(json.dumps(entry) + "\n")
            self._file_handle.flush()

    def log_game(
        self, session: Session, moves: int, step: int | None = None, verbose: bool = True
    ) -> dict[str, Any]:
        """Record a finished game and return the metrics that were written."""
        metrics = {
            "score": session.score,
            "moves": moves,
            "max_tile": max_tile(session),
            "won": is_complete(session),
            "board": grid_to_values(session.grid),
        }
        self.totals.add(metrics["score"], metrics["won"], metrics["max_tile"], moves)
        self.log(metrics, step=step, verbose=verbose)
        return metrics

    def log_summary(self, verbose: bool = True) -> dict[str, Any]:
        """Record the aggregates over every game logged so far."""
        summary = self.totals.summary()
        self.log(summary, header="=== Summary ===", verbose=verbose)
        return summary

    def close(self) -> None:
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
