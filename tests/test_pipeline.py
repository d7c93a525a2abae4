import json

import pytest

from harmony_service.analysis.metrics import METRIC_IDS, calculate_metrics
from harmony_service.analysis.models import GENDERS, AnalysisResult
from harmony_service.analysis.pipeline import analyze_landmarks, format_metrics
from harmony_service.analysis.reference import ReferenceEntry, ReferenceTables
from harmony_service.errors import (
    DegenerateGeometryError,
    InvalidGenderError,
    InvalidLandmarkSetError,
)
from conftest import SYMMETRIC_IPD


def tables_centred_on(face, tolerance=0.05):
    """Reference tables whose single-value ideals equal this face's measurements."""
    computation = calculate_metrics(face)
    return ReferenceTables(
        ReferenceEntry(m.id, gender, m.raw_value, 1.0, tolerance)
        for m in computation.metrics
        for gender in GENDERS
    )


@pytest.mark.parametrize('gender', GENDERS)
def test_scenario_a_ideal_symmetric_frontal_face(symmetric_face, tables, config, gender):
    result = analyze_landmarks(symmetric_face, gender, tables, config)

    assert isinstance(result, AnalysisResult)
    assert result.overall_score == 100.0
    assert all(m.score == 100.0 for m in result.metrics)
    assert result.quality.acceptable
    assert result.quality.roll_degrees == 0.0
    assert result.quality.yaw_proxy == 0.0
    assert result.omitted_metrics == ()
    assert 'exceptional' in result.summary


def test_scenario_a_with_exact_ideal_tables(symmetric_face, config):
    result = analyze_landmarks(symmetric_face, 'male', tables_centred_on(symmetric_face), config)
    assert result.overall_score == 100.0


def test_scenario_b_jaw_asymmetry(face_builder, tables, config):
    baseline = analyze_landmarks(face_builder.symmetric(), 'male', tables, config)
    shifted = analyze_landmarks(face_builder.shift_jaw(0.1 * SYMMETRIC_IPD), 'male', tables, config)

    assert shifted.metric('jaw_symmetry').score < baseline.metric('jaw_symmetry').score
    assert shifted.overall_score < baseline.overall_score

    for metric_id in METRIC_IDS:
        if metric_id == 'jaw_symmetry':
            continue
        assert shifted.metric(metric_id).raw_value == pytest.approx(
            baseline.metric(metric_id).raw_value, abs=1e-9
        )
        assert shifted.metric(metric_id).score == pytest.approx(baseline.metric(metric_id).score)

    assert shifted.quality == baseline.quality


def test_symmetry_score_strictly_decreases_with_asymmetry(face_builder, tables, config):
    scores = [
        analyze_landmarks(face_builder.shift_jaw(dx), 'female', tables, config)
        .metric('jaw_symmetry').score
        for dx in (0.0, 1.0, 2.0, 3.0, 4.0)
    ]

    assert scores[0] == 100.0
    assert all(later < earlier for earlier, later in zip(scores, scores[1:]))


def test_scenario_c_tilted_capture_is_still_scored(face_builder, tables, config):
    result = analyze_landmarks(face_builder.rotate(20), 'female', tables, config)

    assert not result.quality.acceptable
    assert 'roll' in result.quality.issues
    assert 0.0 <= result.overall_score <= 100.0
    assert len(result.metrics) == len(METRIC_IDS)


def test_scenario_d_invalid_gender(symmetric_face, tables, config):
    with pytest.raises(InvalidGenderError):
        analyze_landmarks(symmetric_face, 'other', tables, config)


def test_gender_checked_before_landmarks(tables, config):
    with pytest.raises(InvalidGenderError):
        analyze_landmarks([[0, 0]] * 10, 'other', tables, config)


def test_raw_landmarks_are_validated(face_builder, tables, config):
    pts = face_builder.points()
    result = analyze_landmarks(pts, 'male', tables, config)
    assert result.overall_score == 100.0

    with pytest.raises(InvalidLandmarkSetError):
        analyze_landmarks(pts[:-1], 'male', tables, config)
    with pytest.raises(InvalidLandmarkSetError):
        analyze_landmarks(pts + [[1.0, 1.0]], 'male', tables, config)


def test_degenerate_photo_raises_geometry_error(tables, config):
    with pytest.raises(DegenerateGeometryError):
        analyze_landmarks([[5.0, 5.0]] * 68, 'male', tables, config)


def test_omitted_metric_is_reported_and_excluded(face_builder, tables, config):
    result = analyze_landmarks(face_builder.move({62: (0, -8)}), 'male', tables, config)

    assert result.omitted_metrics == ('lip_fullness', 'philtrum_to_lip')
    assert result.metric('lip_fullness') is None
    # remaining metrics are all inside their ranges
    assert result.overall_score == 100.0


def test_analysis_is_deterministic(face_builder, tables, config):
    face = face_builder.shift_jaw(3.7)
    first = analyze_landmarks(face, 'female', tables, config)
    second = analyze_landmarks(face, 'female', tables, config)

    assert first == second
    assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)


def test_to_dict_shape(symmetric_face, tables, config):
    payload = analyze_landmarks(symmetric_face, 'male', tables, config).to_dict()

    assert set(payload) == {'gender', 'overallScore', 'metrics', 'omittedMetrics', 'quality', 'summary'}
    assert payload['quality'] == {'roll': 0.0, 'yaw': 0.0, 'ipd': 92.0, 'acceptable': True, 'issues': []}
    assert [m['id'] for m in payload['metrics']] == list(METRIC_IDS)
    json.dumps(payload)


def test_format_metrics(symmetric_face, tables, config):
    result = analyze_landmarks(symmetric_face, 'male', tables, config)
    rows = {row['id']: row for row in format_metrics(result, tables)}

    assert rows['nasal_index']['value'] == '0.700'
    assert rows['nasal_index']['ideal'] == '0.650–0.800'
    assert rows['canthal_tilt']['value'] == '5.2°'
    assert rows['jaw_symmetry']['ideal'] == '0.000'
    assert rows['jaw_angle']['label'] == 'Jaw angle'
    assert rows['jaw_angle']['category'] == 'angle'
    assert all(row['score'] == 100.0 for row in rows.values())
