import pytest

from elosscal.lise import (
    LiseError,
    StoppingModel,
    StoppingPowerTable,
    load_table,
    stopping_power_from_lise,
)


def _row(energy, values):
    cells = [str(energy)]
    for value in values:
        cells.extend([str(value), "0"])
    return "\t".join(cells)


def _write(path, rows, extra=()):
    lines = ["header one", "header two", "header three", *extra]
    lines.extend(_row(e, v) for e, v in rows)
    path.write_text("\n".join(lines) + "\n")
    return path


ROWS = [
    (1.0, [10, 11, 12, 13, 14, 15, 16]),
    (2.0, [20, 21, 22, 23, 24, 25, 26]),
    (4.0, [30, 31, 32, 33, 34, 35, 36]),
]


def test_values_at_nodes(tmp_path):
    table = load_table(_write(tmp_path / "t.lise", ROWS))
    assert table.energies == (1.0, 2.0, 4.0)
    for energy, values in ROWS:
        for model in StoppingModel:
            assert table.stopping_power(model, energy) == pytest.approx(values[model])


def test_interpolation_between_nodes(tmp_path):
    table = load_table(_write(tmp_path / "t.lise", ROWS))
    assert table.stopping_power(StoppingModel.HUBERT, 1.5) == pytest.approx(15.0)
    low = table.stopping_power(2, 2.0)
    high = table.stopping_power(2, 4.0)
    mid = table.stopping_power(2, 3.0)
    assert mid == pytest.approx((low + high) / 2)


def test_extrapolation_is_linear(tmp_path):
    table = load_table(_write(tmp_path / "t.lise", ROWS))
    below = table.stopping_power(0, 0.5)
    at1 = table.stopping_power(0, 1.0)
    at2 = table.stopping_power(0, 2.0)
    assert at1 - below == pytest.approx((at2 - at1) / 2)
    above = table.stopping_power(0, 6.0)
    at4 = table.stopping_power(0, 4.0)
    assert above - at4 == pytest.approx(at4 - at2)


def test_comments_duplicates_and_short_lines_skipped(tmp_path):
    path = tmp_path / "t.lise"
    lines = [
        "h1",
        "h2",
        "h3",
        "! comment",
        "",
        "only-one-token",
        _row(1.0, [1, 1, 1, 1, 1, 1, 1]),
        _row(1.0, [9, 9, 9, 9, 9, 9, 9]),
        "garbage\t1",
        _row(3.0, [3, 3, 3, 3, 3, 3, 3]),
    ]
    path.write_text("\n".join(lines) + "\n")
    table = load_table(path)
    assert table.energies == (1.0, 3.0)
    assert table.dedx[0][0] == 1.0


def test_missing_columns_default_to_zero(tmp_path):
    path = tmp_path / "t.lise"
    path.write_text("a\nb\nc\n1\t5\n2\t7\t0\t8\n")
    table = load_table(path)
    assert table.dedx[0] == (5.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    assert table.dedx[1][1] == 8.0


def test_header_lines_are_ignored(tmp_path):
    path = tmp_path / "t.lise"
    path.write_text(_row(0.1, [99] * 7) + "\nx\ny\n" + _row(1.0, [1] * 7) + "\n" + _row(2.0, [2] * 7) + "\n")
    assert load_table(path).energies == (1.0, 2.0)


def test_too_few_points(tmp_path):
    with pytest.raises(LiseError):
        load_table(_write(tmp_path / "t.lise", ROWS[:1]))


def test_missing_file(tmp_path):
    with pytest.raises(LiseError):
        load_table(tmp_path / "nope.lise")


def test_bad_model_index(tmp_path):
    table = load_table(_write(tmp_path / "t.lise", ROWS))
    with pytest.raises(ValueError):
        table.stopping_power(7, 1.0)


def test_table_needs_two_points():
    with pytest.raises(LiseError):
        StoppingPowerTable((1.0,), ((1.0,) * 7,))


def test_stopping_power_from_lise_matches_table(tmp_path):
    path = _write(tmp_path / "t.lise", ROWS)
    table = load_table(path)
    assert stopping_power_from_lise(path, 3, 2.7) == table.stopping_power(3, 2.7)