import math

import numpy as np
import pytest

from li7fit.params import (
    ParameterSet,
    append_record,
    read_parameters,
    write_parameters,
)


@pytest.fixture
def param_file(tmp_path):
    path = tmp_path / "para.dat"
    path.write_text("4 1\n9 0\n1.5 1\n-0.25 1\n")
    return path


def test_read_takes_square_root_of_peak_yields(param_file):
    params = read_parameters(param_file, npeaks=2)
    assert params.values[0] == pytest.approx(math.sqrt(4))
    assert params.values[1] == pytest.approx(math.sqrt(9))
    assert params.values[2:] == (1.5, -0.25)
    assert params.used == (True, False, True, True)


def test_yields_restore_file_values(param_file):
    params = read_parameters(param_file, npeaks=2)
    assert params.yields == pytest.approx((4.0, 9.0, 1.5, -0.25))


def test_round_trip(tmp_path, param_file):
    params = read_parameters(param_file, npeaks=2)
    out = tmp_path / "para2.dat"
    write_parameters(out, params)
    assert out.read_text() == param_file.read_text()
    again = read_parameters(out, npeaks=2)
    assert again == params


def test_trailing_value_without_flag_is_ignored(tmp_path):
    path = tmp_path / "para.dat"
    path.write_text("4 1 2.5 0 7")
    params = read_parameters(path, npeaks=1)
    assert len(params) == 2


def test_bad_flag_raises(tmp_path):
    path = tmp_path / "para.dat"
    path.write_text("4 yes\n")
    with pytest.raises(ValueError):
        read_parameters(path, npeaks=1)


def test_negative_peak_yield_raises(tmp_path):
    path = tmp_path / "para.dat"
    path.write_text("-4 1\n")
    with pytest.raises(ValueError):
        read_parameters(path, npeaks=1)


def test_too_many_parameters_raises(tmp_path):
    path = tmp_path / "para.dat"
    path.write_text("1 1\n" * 31)
    with pytest.raises(ValueError):
        read_parameters(path, npeaks=0)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_parameters(tmp_path / "absent.dat", npeaks=1)


def test_free_values_selects_used_entries():
    params = ParameterSet((1.0, 2.0, 3.0, 4.0), (True, False, True, False), 1)
    np.testing.assert_allclose(params.free_values(), [1.0, 3.0])
    assert params.free_count == 2


def test_with_free_values_keeps_fixed_entries():
    params = ParameterSet((1.0, 2.0, 3.0), (False, True, True), 1)
    updated = params.with_free_values([5.0, 6.0])
    assert updated.values == (1.0, 5.0, 6.0)
    assert params.values == (1.0, 2.0, 3.0)
    np.testing.assert_allclose(updated.free_values(), [5.0, 6.0])


def test_with_free_values_wrong_length_raises():
    params = ParameterSet((1.0, 2.0), (True, True), 1)
    with pytest.raises(ValueError):
        params.with_free_values([1.0])


def test_mismatched_flags_raise():
    with pytest.raises(ValueError):
        ParameterSet((1.0, 2.0), (True,), 1)


def test_append_record_appends_lines(tmp_path):
    log = tmp_path / "record_grid.txt"
    append_record(log, 12.5, ["sim_a.root", "sim_b.root"])
    append_record(log, 3.0, ["sim_c.root"])
    lines = log.read_text().splitlines()
    assert lines == [
        "12.5\tf1:sim_a.root    f2:sim_b.root",
        "3\tf1:sim_c.root",
    ]