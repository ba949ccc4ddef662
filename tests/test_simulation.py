"""Tests for the headless simulation driver."""

import csv

from chatlife.simulation import _summarize, run_simulation


class TestRunSimulation:
    def test_collects_stats_per_step(self):
        stats = run_simulation(steps=40, seed=3, log_every=0, summary=False)
        assert len(stats) == 40
        assert [s.step for s in stats] == list(range(1, 41))
        assert all(s.population >= 5 for s in stats)

    def test_seed_is_reproducible(self):
        first = run_simulation(steps=60, seed=11, log_every=0, summary=False, chat_rate=20)
        second = run_simulation(steps=60, seed=11, log_every=0, summary=False, chat_rate=20)
        assert [(s.population, s.food, s.energy) for s in first] == [(s.population, s.food, s.energy) for s in second]

    def test_chat_raises_energy(self):
        quiet = run_simulation(steps=60, seed=5, log_every=0, summary=False)
        busy = run_simulation(steps=60, seed=5, log_every=0, summary=False, chat_rate=60)
        assert busy[-1].energy > quiet[-1].energy

    def test_csv_export(self, tmp_path):
        path = tmp_path / "stats.csv"
        run_simulation(steps=10, seed=1, log_every=0, summary=False, csv_path=str(path))
        with open(path, newline="") as handle:
            rows = list(csv.DictReader(handle))
        assert len(rows) == 10
        assert {"population", "energy", "weather", "max_generation"} <= set(rows[0])

    def test_prints_progress_and_summary(self, capsys):
        run_simulation(steps=20, seed=2, log_every=10)
        out = capsys.readouterr().out
        assert "step=10" in out
        assert "step=20" in out
        assert "summary:" in out

    def test_ascii_frames(self, capsys):
        run_simulation(steps=4, seed=2, log_every=0, summary=False, render_every=2, render_ascii_enabled=True)
        assert capsys.readouterr().out.count("pop=") == 2

    def test_ppm_frames(self, tmp_path):
        run_simulation(
            steps=4, seed=2, log_every=0, summary=False, render_every=2, render_path=str(tmp_path), render_scale=0.02
        )
        assert sorted(p.name for p in tmp_path.iterdir()) == ["frame_2.ppm", "frame_4.ppm"]


def test_summarize_empty():
    summary = _summarize([])
    assert summary["steps"] == 0
    assert summary["avg_pop"] == 0.0
