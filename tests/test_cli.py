import json

import numpy as np
import pandas as pd
import pytest

from enetcv.cli import build_parser, load_csv_dataset, main


@pytest.fixture
def csv_path(tmp_path, make_separable):
    X, y = make_separable(90, 4, seed=21)
    df = pd.DataFrame(X, columns=["a", "b", "c", "d"]).round(4).astype(object)
    df.insert(0, "id", range(1000, 1090))
    df["class"] = np.where(y == 1, 4, 2)
    df.loc[[5, 40], "c"] = "?"
    path = tmp_path / "cells.csv"
    df.to_csv(path, index=False)
    return path


def test_load_csv_dataset(csv_path):
    ds = load_csv_dataset(csv_path, "class", 4, na_values=["?"], drop_columns=["id"])
    assert ds.feature_names == ("a", "b", "c", "d")
    assert ds.classes == (2, 4)
    assert int(ds.missing_mask().sum()) == 2


def test_main_prints_a_json_summary(csv_path, tmp_path, capsys):
    model_path = tmp_path / "model.npz"
    code = main([
        "--csv", str(csv_path),
        "--target", "class",
        "--positive-label", "4",
        "--na-values", "?",
        "--drop-columns", "id",
        "--folds", "3",
        "--lambdas", "1", "0.1",
        "--save-model", str(model_path),
    ])
    assert code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["n_imputed"] == 2
    assert summary["n_fits"] == 6
    assert 0.0 <= summary["accuracy"] <= 1.0
    assert model_path.exists()


def test_main_reports_bad_input(tmp_path, capsys):
    code = main(["--csv", str(tmp_path / "absent.csv"), "--target", "class", "--positive-label", "1"])
    assert code == 2
    assert "error" in capsys.readouterr().err


def test_parser_requires_target():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--csv", "x.csv", "--positive-label", "1"])
