from pathlib import Path

import pytest

import benchmark
import main


def run_main(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr("sys.argv", ["main.py", *args])
    return main.main()


def test_reference_scenario(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    assert run_main(monkeypatch, "--show-map") == 0
    out = capsys.readouterr().out

    assert "Nearest driver for Order O001 at (4, 5): Driver D002 at (5, 7)" in out
    assert "Total drivers: 4" in out
    assert "Occupancy map (10x10):" in out
    # After D001 moves to (3, 4) it is the closest (distance 2).
    assert "Driver D001 at (3, 4) (Available: True) (distance: 2)" in out


@pytest.mark.parametrize("strategy", ["sort", "heap", "array", "ordered_set"])
def test_reference_scenario_every_strategy(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture, strategy: str
) -> None:
    assert run_main(monkeypatch, "--strategy", strategy, "--k", "3") == 0
    out = capsys.readouterr().out
    listing = out.split("3 nearest drivers for Order O001 at (4, 5):")[1].splitlines()[1:4]

    assert [line.split()[1] for line in listing] == ["D002", "D001", "D004"]


def test_run_from_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    drivers = tmp_path / "drivers.csv"
    orders = tmp_path / "orders.csv"
    drivers.write_text("driver_id,x,y,is_available\nA,0,0,1\nB,4,4,1\nC,4,4,1\nD,1,1,0\n")
    orders.write_text("order_id,x,y\nO1,1,1\nO2,20,20\n")

    code = run_main(
        monkeypatch, "--drivers", str(drivers), "--orders", str(orders), "--width", "5", "--height", "5", "--k", "2"
    )
    out = capsys.readouterr().out

    assert code == 0
    assert "Loaded 3 drivers and 2 orders onto a 5x5 map" in out
    assert "driver C rejected: CELL_OCCUPIED" in out
    assert "Nearest driver for Order O1 at (1, 1): Driver A at (0, 0)" in out
    assert "No driver found for Order O2 at (20, 20)" in out


def test_missing_driver_file_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert run_main(monkeypatch, "--drivers", str(tmp_path / "missing.csv")) == 1


def test_benchmark_strategies_agree() -> None:
    rows = benchmark.run_fleet(fleet_size=60, grid_size=12, k_values=[1, 4], query_count=15, seed=5)

    assert rows is not None
    assert len(rows) == 2 * len(benchmark.STRATEGIES)
    assert all(row["matches_sort"] == "yes" for row in rows)

    summary = benchmark.build_summary(rows)
    assert list(summary.index) == [(60, 1), (60, 4)]
    assert set(summary.columns) == {"sort", "heap", "array", "ordered_set"}


def test_benchmark_fleet_too_large() -> None:
    assert benchmark.run_fleet(fleet_size=50, grid_size=5, k_values=[1], query_count=3, seed=1) is None


def test_benchmark_timing_starts_with_current_snapshot(monkeypatch: pytest.MonkeyPatch) -> None:
    stale = []
    original = benchmark.time_strategy

    def checked(engine, orders, k, strategy):
        stale.append(engine._snapshot_version != engine.registry.version)
        return original(engine, orders, k, strategy)

    monkeypatch.setattr(benchmark, "time_strategy", checked)
    assert benchmark.run_fleet(fleet_size=30, grid_size=10, k_values=[1, 3], query_count=5, seed=2) is not None

    assert stale and not any(stale)
