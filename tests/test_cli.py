"""Tests for the command line interface."""

import io
import json

import pandas as pd
import pytest

from clindca.cli import main, parse_assignments


@pytest.fixture
def cohort_csv(tmp_path, synthetic_cohort):
    path = tmp_path / "cohort.csv"
    synthetic_cohort.to_csv(path, index=False)
    return path


def read_stdout(capsys):
    return pd.read_csv(io.StringIO(capsys.readouterr().out))


def test_parse_assignments():
    assert parse_assignments(["a=0.1", "b=2"], "--harm", float) == {"a": 0.1, "b": 2.0}
    with pytest.raises(ValueError):
        parse_assignments(["a"], "--harm")


def test_binary_table_to_stdout(cohort_csv, capsys):
    main([
        "--data", str(cohort_csv),
        "--outcome", "cancer",
        "--predictors", "model", "famhistory",
        "--score-kind", "famhistory=binary-indicator",
        "--harm", "model=0.01",
        "--thresholds", "0.1", "0.5", "0.1",
    ])
    table = read_stdout(capsys)
    assert list(pd.unique(table["predictor"])) == ["treat_all", "treat_none", "model", "famhistory"]
    assert len(table) == 4 * 5
    assert (table.loc[table["predictor"] == "model", "harm"] <= 0.01).all()


def test_interventions_view(cohort_csv, capsys):
    main([
        "--data", str(cohort_csv),
        "--outcome", "cancer",
        "--predictors", "model",
        "--view", "interventions",
        "--nper", "1000",
    ])
    view = read_stdout(capsys)
    assert list(view.columns) == ["predictor", "threshold", "net_intervention_avoided", "nper"]
    assert (view["nper"] == 1000).all()


def test_config_file_and_smoothing(cohort_csv, tmp_path, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"score_kinds": {"marker": "raw-score-to-rescale"}}))
    main([
        "--data", str(cohort_csv),
        "--outcome", "cancer",
        "--predictors", "marker",
        "--config", str(config_path),
        "--smooth",
    ])
    table = read_stdout(capsys)
    assert table.loc[table["predictor"] == "marker", "smoothed"].all()


def test_excluded_predictor_reported(cohort_csv, capsys):
    main([
        "--data", str(cohort_csv),
        "--outcome", "cancer",
        "--predictors", "model", "marker",
        "--thresholds", "0.1", "0.3", "0.1",
    ])
    captured = capsys.readouterr()
    assert "predictor 'marker' excluded" in captured.err
    assert "model" in captured.out


def test_case_control_without_horizon_conflict(cohort_csv):
    with pytest.raises(SystemExit) as exc:
        main([
            "--data", str(cohort_csv),
            "--outcome", "cancer",
            "--predictors", "model",
            "--time", "cancer",
            "--time-horizon", "1.0",
            "--prevalence", "0.1",
        ])
    assert exc.value.code == 1


def test_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--data", str(tmp_path / "nope.csv"), "--outcome", "y", "--predictors", "p"])
    assert exc.value.code == 1


def test_invalid_grid_exits(cohort_csv, capsys):
    with pytest.raises(SystemExit) as exc:
        main([
            "--data", str(cohort_csv),
            "--outcome", "cancer",
            "--predictors", "model",
            "--thresholds", "0.0", "0.5", "0.1",
        ])
    assert exc.value.code == 1
    assert "Error" in capsys.readouterr().err


def test_case_control_requires_prevalence(cohort_csv, capsys):
    with pytest.raises(SystemExit) as exc:
        main([
            "--data", str(cohort_csv),
            "--outcome", "cancer",
            "--predictors", "model",
            "--case-control",
        ])
    assert exc.value.code == 1
    assert "prevalence" in capsys.readouterr().err


def test_case_control_with_prevalence(cohort_csv, capsys):
    main([
        "--data", str(cohort_csv),
        "--outcome", "cancer",
        "--predictors", "model",
        "--case-control",
        "--prevalence", "0.05",
        "--thresholds", "0.1", "0.3", "0.1",
    ])
    table = read_stdout(capsys)
    treat_all = table[table["predictor"] == "treat_all"]
    assert treat_all["tp_rate"].tolist() == pytest.approx([0.05] * 3)
