import pytest

from harmony_service.analysis.metrics import METRIC_IDS, calculate_metrics
from harmony_service.analysis.models import GENDERS, Metric
from harmony_service.analysis.reference import ReferenceEntry, ReferenceTables
from harmony_service.analysis.scoring import (
    normalized_weights,
    overall_score,
    score_metrics,
    score_value,
)
from harmony_service.errors import DegenerateGeometryError, UnknownMetricError


def entry(ideal, tolerance=0.1, weight=1.0, metric_id='m', gender='male'):
    return ReferenceEntry(metric_id, gender, ideal, weight, tolerance)


def test_single_value_ideal():
    e = entry(1.0, tolerance=0.1)
    assert score_value(1.0, e) == 100.0
    assert score_value(1.1, e) == pytest.approx(90.0)
    assert score_value(0.9, e) == pytest.approx(90.0)


def test_range_ideal_is_flat_inside_and_symmetric_outside():
    e = entry((1.0, 2.0), tolerance=0.1)
    for v in (1.0, 1.5, 2.0):
        assert score_value(v, e) == 100.0
    assert score_value(0.95, e) == pytest.approx(score_value(2.05, e))
    assert score_value(2.1, e) == pytest.approx(90.0)


def test_tolerance_band_keeps_score_at_least_90():
    e = entry(5.0, tolerance=2.0)
    for v in (3.0, 3.5, 4.2, 5.0, 6.1, 7.0):
        assert score_value(v, e) >= 90.0 - 1e-9


def test_score_decays_monotonically_toward_zero():
    e = entry(0.0, tolerance=0.03)
    scores = [score_value(d, e) for d in (0.0, 0.01, 0.03, 0.06, 0.1, 0.3, 1.0)]

    assert scores == sorted(scores, reverse=True)
    assert len(set(scores[:5])) == 5
    assert scores[-1] == pytest.approx(0.0, abs=1e-6)
    assert all(0.0 <= s <= 100.0 for s in scores)


def test_non_finite_value_scores_zero():
    assert score_value(float('nan'), entry(1.0)) == 0.0


def test_score_metrics_uses_gender_entry(tables):
    metrics = [Metric('jaw_angle', 118.0, 'degrees')]
    male = score_metrics(metrics, 'male', tables)[0]
    female = score_metrics(metrics, 'female', tables)[0]

    assert male.raw_value == 118.0
    assert male.score > female.score


def test_unknown_metric_is_fatal(tables):
    with pytest.raises(UnknownMetricError):
        score_metrics([Metric('hairline_height', 1.0, 'ratio')], 'male', tables)

    partial = ReferenceTables([entry(1.0, metric_id='nasal_index', gender='male')])
    with pytest.raises(UnknownMetricError):
        score_metrics([Metric('nasal_index', 1.0, 'ratio')], 'female', partial)


def test_weights_renormalize_over_present_metrics(symmetric_face, tables):
    metrics = score_metrics(calculate_metrics(symmetric_face).metrics, 'male', tables)

    full = normalized_weights(metrics, 'male', tables)
    assert set(full) == set(METRIC_IDS)
    assert sum(full.values()) == pytest.approx(1.0)

    remaining = [m for m in metrics if m.id != 'jaw_symmetry']
    reduced = normalized_weights(remaining, 'male', tables)
    assert set(reduced) == {m.id for m in remaining}
    assert sum(reduced.values()) == pytest.approx(1.0)

    # mass is redistributed proportionally
    scale = 1.0 / (1.0 - full['jaw_symmetry'])
    for metric_id, weight in reduced.items():
        assert weight == pytest.approx(full[metric_id] * scale)


@pytest.mark.parametrize('gender', GENDERS)
def test_overall_is_normalized_weighted_sum(face_builder, tables, gender):
    face = face_builder.move({8: (0, 30), 54: (6, 4)})
    metrics = score_metrics(calculate_metrics(face).metrics, gender, tables)
    remaining = [m for m in metrics if m.id != 'canthal_tilt']

    for subset in (metrics, remaining):
        weights = normalized_weights(subset, gender, tables)
        expected = sum(weights[m.id] * m.score for m in subset)
        assert expected < 100.0
        assert overall_score(subset, gender, tables) == pytest.approx(expected)


def test_excluded_metric_does_not_count_as_zero():
    tables = ReferenceTables([
        entry(1.0, weight=2.0, metric_id='a'),
        entry(1.0, weight=1.0, metric_id='b'),
        entry(1.0, weight=1.0, metric_id='c'),
    ])
    metrics = [
        Metric('a', 1.0, 'ratio', score=90.0),
        Metric('b', 1.0, 'ratio', score=60.0),
    ]

    assert overall_score(metrics, 'male', tables) == pytest.approx((2 * 90 + 60) / 3)


def test_overall_of_empty_set_fails(tables):
    with pytest.raises(DegenerateGeometryError):
        overall_score([], 'male', tables)


@pytest.mark.parametrize('gender', GENDERS)
def test_scores_stay_in_bounds_for_distorted_faces(face_builder, tables, gender):
    faces = [
        face_builder.symmetric(),
        face_builder.shift_jaw(40),
        face_builder.rotate(35),
        face_builder.move({8: (0, 120), 33: (30, -20), 45: (10, 25), 57: (0, 40)}),
    ]
    for face in faces:
        metrics = score_metrics(calculate_metrics(face).metrics, gender, tables)
        assert all(0.0 <= m.score <= 100.0 for m in metrics)
        assert 0.0 <= overall_score(metrics, gender, tables) <= 100.0
