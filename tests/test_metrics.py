import math
import warnings

import numpy as np
import pytest

from enetcv import (
    ConfusionCounts,
    DataIntegrityError,
    Dataset,
    FittedModel,
    HyperParameterPoint,
    ScalingParams,
    UndefinedMetricWarning,
    confusion_counts,
    evaluate,
)


def test_derived_metrics():
    counts = ConfusionCounts(tp=50, tn=40, fp=5, fn=5)
    assert counts.total == 100
    assert counts.accuracy == pytest.approx(0.9)
    assert counts.precision == pytest.approx(50 / 55)
    assert counts.recall == pytest.approx(50 / 55)
    assert counts.specificity == pytest.approx(40 / 45)
    assert counts.f1 == pytest.approx(50 / 55)
    assert counts.youden_j == pytest.approx(50 / 55 + 40 / 45 - 1)


def test_zero_denominator_is_nan_not_zero():
    counts = ConfusionCounts(tp=0, tn=10, fp=0, fn=0)
    with pytest.warns(UndefinedMetricWarning):
        assert math.isnan(counts.precision)
    with pytest.warns(UndefinedMetricWarning):
        assert math.isnan(counts.recall)
    assert counts.specificity == 1.0
    assert counts.accuracy == 1.0


def test_as_dict_is_quiet_and_keeps_nan():
    counts = ConfusionCounts(tp=0, tn=0, fp=3, fn=0)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        out = counts.as_dict()
    assert out["precision"] == 0.0
    assert math.isnan(out["recall"])
    assert out["specificity"] == 0.0


def test_confusion_counts_and_positive_label():
    y_true = np.array([1, 1, 0, 0, 1, 0])
    y_pred = np.array([1, 0, 0, 1, 1, 0])
    counts = confusion_counts(y_true, y_pred)
    assert (counts.tp, counts.tn, counts.fp, counts.fn) == (2, 2, 1, 1)

    flipped = confusion_counts(np.array([1, 1, 1, 0]), np.array([1, 1, 0, 0]), positive_label=0)
    assert (flipped.tp, flipped.tn, flipped.fp, flipped.fn) == (1, 2, 1, 0)


def test_confusion_counts_validation():
    with pytest.raises(DataIntegrityError):
        confusion_counts([0, 1], [0, 1, 1])
    with pytest.raises(DataIntegrityError):
        confusion_counts([0, 2], [0, 1])
    with pytest.raises(DataIntegrityError):
        confusion_counts([0, 1], [0, 1], positive_label=4)
    with pytest.raises(ValueError):
        ConfusionCounts(tp=-1, tn=0, fp=0, fn=0)


@pytest.fixture
def unit_model():
    return FittedModel(
        intercept=0.0,
        coef=np.array([1.0]),
        point=HyperParameterPoint(1.0, 0.1),
        scaling=ScalingParams.identity(1),
    )


@pytest.fixture
def four_rows():
    return Dataset(np.array([[-2.0], [-1.0], [1.0], [2.0]]), np.array([0, 1, 1, 0]))


def test_evaluate_uses_stored_scaling_by_default(unit_model, four_rows):
    counts = evaluate(unit_model, None, four_rows)
    assert (counts.tp, counts.tn, counts.fp, counts.fn) == (1, 1, 1, 1)

    swapped = evaluate(unit_model, None, four_rows, positive_label=0)
    assert (swapped.tp, swapped.tn, swapped.fp, swapped.fn) == (1, 1, 1, 1)


def test_evaluate_applies_the_given_parameters(unit_model, four_rows):
    shifted = ScalingParams("standardize", np.array([1.5]), np.array([2.0]))
    counts = evaluate(unit_model, shifted, four_rows)
    assert (counts.tp, counts.tn, counts.fp, counts.fn) == (0, 1, 1, 2)


def test_evaluate_threshold(unit_model, four_rows):
    counts = evaluate(unit_model, None, four_rows, threshold=0.8)
    # only x=2 clears sigmoid(x) >= 0.8
    assert (counts.tp, counts.tn, counts.fp, counts.fn) == (0, 1, 1, 2)


def test_evaluate_rejects_mismatched_or_incomplete_data(unit_model):
    with pytest.raises(DataIntegrityError):
        evaluate(unit_model, None, Dataset(np.zeros((2, 2)), np.array([0, 1])))
    with pytest.raises(DataIntegrityError):
        evaluate(unit_model, None, Dataset(np.array([[np.nan], [1.0]]), np.array([0, 1])))


def test_f1_is_zero_when_no_positive_is_found():
    counts = ConfusionCounts(tp=0, tn=5, fp=3, fn=2)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert counts.precision == 0.0
        assert counts.recall == 0.0
        assert counts.f1 == 0.0
        assert counts.as_dict()["f1"] == 0.0
