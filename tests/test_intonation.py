"""Tests for contour statistics, the scoring rubric and the full pipeline."""

import math

import numpy as np
import pytest

from conftest import SR, glide, sine
from pitchcoach.config import DEFAULT_CONFIG
from pitchcoach.intonation import (INSUFFICIENT_FEEDBACK, FeatureSet,
                                   analyze_intonation, build_feedback,
                                   compute_features, score_features,
                                   synthesize_score)

NUMERIC_KEYS = {"range", "sd", "slope", "pitchCount", "meanPitch"}


def features(range_: float = 30.0, sd: float = 20.0,
             slope: float = 0.0) -> FeatureSet:
    return FeatureSet(min=100.0, max=100.0 + range_, range=range_,
                      mean=120.0, variance=sd ** 2,
                      standard_deviation=sd, slope=slope, count=10)


class TestComputeFeatures:
    """Tests for contour statistics."""

    def test_steady_contour(self) -> None:
        result = compute_features([100, 105, 110, 108, 102])
        assert result.range == 10
        assert result.mean == pytest.approx(105.0)
        assert result.variance == pytest.approx(13.6)
        assert result.standard_deviation == pytest.approx(math.sqrt(13.6))
        assert result.slope == pytest.approx(0.4)
        assert result.count == 5

    def test_varied_contour(self) -> None:
        result = compute_features([150, 180, 140, 200, 130, 210])
        assert result.min == 130
        assert result.max == 210
        assert result.range == 80
        assert result.mean == pytest.approx(168.333, abs=1e-3)
        assert result.standard_deviation == pytest.approx(30.23, abs=0.01)
        assert result.slope == pytest.approx(10.0)

    def test_slope_uses_endpoints_only(self) -> None:
        """The slope ignores interior points."""
        result = compute_features([200, 100, 300, 100, 190])
        assert result.slope == pytest.approx(-2.0)

    def test_too_short_raises(self) -> None:
        with pytest.raises(ValueError):
            compute_features([100, 110, 120, 130])


class TestScoreFeatures:
    """Tests for the bucketed rubric."""

    def test_steady_contour_scores_30(self) -> None:
        assert score_features(compute_features([100, 105, 110, 108, 102])) == 30

    def test_varied_contour_scores_80(self) -> None:
        assert score_features(compute_features([150, 180, 140, 200, 130, 210])) == 80

    @pytest.mark.parametrize("range_, points", [
        (19.99, 10), (20.0, 30), (59.99, 30), (60.0, 40)])
    def test_range_buckets(self, range_: float, points: int) -> None:
        # sd 20 -> 30 points, slope 0 -> 20 points
        assert score_features(features(range_=range_)) == points + 50

    @pytest.mark.parametrize("sd, points", [
        (9.99, 10), (10.0, 30), (39.99, 30), (40.0, 20), (80.0, 20)])
    def test_sd_buckets_non_monotonic(self, sd: float, points: int) -> None:
        # range 30 -> 30 points, slope 0 -> 20 points
        assert score_features(features(sd=sd)) == points + 50

    @pytest.mark.parametrize("slope, points", [
        (-0.11, 30), (-0.1, 20), (0.0, 20), (0.049, 20), (0.05, 10), (3.0, 10)])
    def test_slope_buckets(self, slope: float, points: int) -> None:
        # range 30 -> 30 points, sd 20 -> 30 points
        assert score_features(features(slope=slope)) == points + 60

    def test_best_possible_score(self) -> None:
        assert score_features(features(range_=100, sd=20, slope=-1)) == 100

    def test_clamped_to_100(self) -> None:
        config = DEFAULT_CONFIG.with_overrides(range_points=(10, 30, 90))
        assert score_features(features(range_=100, sd=20, slope=-1), config) == 100


class TestFeedback:
    """Tests for templated feedback."""

    def test_steady_contour(self) -> None:
        text = build_feedback(compute_features([100, 105, 110, 108, 102]))
        assert "monotone" in text
        assert "robotic" in text
        assert "question" in text

    def test_varied_contour(self) -> None:
        text = build_feedback(compute_features([150, 180, 140, 200, 130, 210]))
        assert text.startswith("Great tonal variation!")
        assert "Great vocal stability." in text

    def test_falling_ending(self) -> None:
        text = build_feedback(features(slope=-0.5))
        assert text.endswith("(natural for statements).")

    def test_neutral_ending(self) -> None:
        assert build_feedback(features(slope=0.1)).endswith("Neutral ending.")

    def test_shaky_voice(self) -> None:
        assert "shaky" in build_feedback(features(sd=45))

    def test_no_surrounding_whitespace(self) -> None:
        text = build_feedback(features())
        assert text == text.strip()


class TestSynthesizeScore:
    """Tests for building the analysis result."""

    def test_insufficient(self) -> None:
        data = synthesize_score(None).get_data()
        assert data == {"score": 0, "feedback": INSUFFICIENT_FEEDBACK}

    def test_insufficient_feedback_has_no_feature_values(self) -> None:
        feedback = synthesize_score(None).get_value("feedback")
        assert feedback
        assert "Hz" not in feedback
        assert "Speak louder" in feedback

    def test_success_fields_rounded(self) -> None:
        result = synthesize_score(compute_features([150, 180, 140, 200, 130, 210]))
        data = result.get_data()
        assert result.succeeded
        assert data["score"] == 80
        assert data["range"] == 80.0
        assert data["sd"] == pytest.approx(30.23, abs=0.01)
        assert data["slope"] == 10.0
        assert data["pitchCount"] == 6
        assert data["meanPitch"] == 168.33


class TestAnalyzeIntonation:
    """Tests for the whole pipeline on synthetic audio."""

    def test_silence_is_insufficient(self, silence) -> None:
        data = analyze_intonation(silence, SR).get_data()
        assert data["score"] == 0
        assert NUMERIC_KEYS.isdisjoint(data)

    def test_too_short(self) -> None:
        data = analyze_intonation(sine(200.0, seconds=0.01), SR).get_data()
        assert data["score"] == 0
        assert NUMERIC_KEYS.isdisjoint(data)

    def test_flat_tone(self, voiced_200hz) -> None:
        """Flat pitch: narrow range, robotic, neutral ending."""
        data = analyze_intonation(voiced_200hz, SR).get_data()
        assert data["pitchCount"] == 124
        assert data["meanPitch"] == pytest.approx(200.0, abs=1.0)
        assert data["range"] < 20
        assert data["score"] == 40

    def test_falling_glide(self, events) -> None:
        """A statement-like fall from 250 Hz to 150 Hz gets full marks."""
        data = analyze_intonation(glide(250.0, 150.0), SR,
                                  on_event=events).get_data()
        assert data["slope"] < -0.1
        assert data["range"] >= 60
        assert 10 <= data["sd"] < 40
        assert data["score"] == 100
        assert events.received[-1][0] == "features_computed"

    def test_rising_glide_sounds_like_question(self) -> None:
        data = analyze_intonation(glide(150.0, 250.0), SR).get_data()
        assert data["slope"] > 0.1
        assert "question" in data["feedback"]
        assert data["score"] == 80

    def test_quiet_recording_amplified(self, events) -> None:
        data = analyze_intonation(sine(200.0, amplitude=0.03), SR,
                                  on_event=events).get_data()
        assert events.received[0][0] == "amplified"
        assert data["pitchCount"] == 124

    def test_score_is_int_in_range(self) -> None:
        rng = np.random.default_rng(0)
        noise = (0.3 * rng.standard_normal(SR)).astype(np.float32)
        score = analyze_intonation(noise, SR).get_value("score")
        assert isinstance(score, int)
        assert 0 <= score <= 100

    def test_input_not_mutated(self) -> None:
        y = sine(200.0, amplitude=0.05)
        before = y.copy()
        analyze_intonation(y, SR)
        np.testing.assert_array_equal(y, before)
