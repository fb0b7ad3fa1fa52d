import numpy as np
import pytest

from li7fit.kinematics import production_rate
from li7fit.plots import (
    FitTable,
    hourly_rate,
    plot_fit_table,
    read_fit_table,
    read_loss_file,
)


def _write_table(path, rows):
    path.write_text("\n".join(" ".join(str(v) for v in row) + " " for row in rows) + "\n")


def test_read_fit_table_columns(tmp_path):
    path = tmp_path / "out.dat"
    _write_table(path, [[2.5, 10, 3, 9, 4, 5], [2.54, 12, 3.5, 11, 4.5, 6.5]])
    table = read_fit_table(path)
    assert len(table) == 2
    assert table.npeaks == 1
    assert table.x.tolist() == [2.5, 2.54]
    assert table.y.tolist() == [10, 12]
    assert table.sigma.tolist() == [3, 3.5]
    assert table.total.tolist() == [9, 11]
    assert table.background.tolist() == [4, 4.5]
    assert table.peaks[0].tolist() == [5, 6.5]


def test_read_fit_table_two_peaks_and_none(tmp_path):
    two = tmp_path / "two.dat"
    _write_table(two, [[1, 2, 3, 4, 5, 6, 7]])
    assert read_fit_table(two).npeaks == 2
    none = tmp_path / "none.dat"
    _write_table(none, [[1, 2, 3, 4, 5]])
    assert read_fit_table(none).peaks == []


def test_read_fit_table_rejects_ragged_rows(tmp_path):
    path = tmp_path / "bad.dat"
    _write_table(path, [[1, 2, 3, 4, 5, 6], [1, 2, 3, 4, 5]])
    with pytest.raises(ValueError):
        read_fit_table(path)


def test_read_fit_table_rejects_short_and_empty(tmp_path):
    short = tmp_path / "short.dat"
    _write_table(short, [[1, 2, 3]])
    with pytest.raises(ValueError):
        read_fit_table(short)
    empty = tmp_path / "empty.dat"
    empty.write_text("")
    with pytest.raises(ValueError):
        read_fit_table(empty)


def test_plot_fit_table_writes_png(tmp_path):
    x = np.linspace(3, 7, 20)
    table = FitTable(
        x=x,
        y=x * 2,
        sigma=np.ones_like(x),
        total=x * 2,
        background=x,
        peaks=[x, x / 2],
    )
    out = tmp_path / "fit.png"
    plot_fit_table(table, out, (3, 7), (0, 250))
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_plot_round_trip_from_file(tmp_path):
    path = tmp_path / "out.dat"
    _write_table(path, [[2.8 + 0.1 * i, 10 + i, 1, 9 + i, 3, 6 + i] for i in range(10)])
    out = tmp_path / "fit.svg"
    plot_fit_table(read_fit_table(path), out, None, None)
    assert "<svg" in out.read_text()


def test_hourly_rate_matches_production_rate():
    sigma = 104.57
    assert hourly_rate(1.0, sigma) == pytest.approx(production_rate(sigma) * 3600)


def test_hourly_rate_scales_with_efficiency():
    assert hourly_rate(0.0) == 0.0
    assert hourly_rate(0.2) == pytest.approx(2 * hourly_rate(0.1))
    assert hourly_rate(0.1, 50.0) == pytest.approx(hourly_rate(0.1, 100.0) / 2)


def test_read_loss_file(tmp_path):
    path = tmp_path / "H_in_CH2.loss"
    path.write_text("hydrogen in CH2\n3\n0.1 500\n1.0 200.5\n10 30\n")
    title, energies, dedx = read_loss_file(path)
    assert title == "hydrogen in CH2"
    assert energies.tolist() == [0.1, 1.0, 10.0]
    assert dedx.tolist() == [500.0, 200.5, 30.0]


def test_read_loss_file_too_few_points(tmp_path):
    path = tmp_path / "short.loss"
    path.write_text("title\n4\n0.1 500\n1.0 200\n")
    with pytest.raises(ValueError):
        read_loss_file(path)


def test_read_loss_file_missing_count(tmp_path):
    path = tmp_path / "nothing.loss"
    path.write_text("only a title\n")
    with pytest.raises(ValueError):
        read_loss_file(path)