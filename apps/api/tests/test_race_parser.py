"""
Tests for the free-text race result scanner.
"""

import pytest

from services.race_parser import (
    LOOKAHEAD_TOKENS,
    extract_race_samples,
    parse_distance_km_token,
    time_string_to_seconds,
)


class TestTimeTokens:

    TIME_TESTS = [
        ("45:00", 2700),
        ("1:40:30", 6030),
        ("1h40", 6000),
        ("1h40m", 6000),
        ("1h40m30s", 6030),
        ("45m", 2700),
        ("45min", 2700),
        ("3600s", 3600),
        ("90", 5400),   # bare >= 10 -> minutes
        ("9", 9),       # bare < 10 -> seconds
    ]

    @pytest.mark.parametrize("token,expected", TIME_TESTS)
    def test_time_formats(self, token, expected):
        assert time_string_to_seconds(token) == expected

    @pytest.mark.parametrize("token", ["", "   ", "fast", "h"])
    def test_not_a_time(self, token):
        assert time_string_to_seconds(token) is None


class TestDistanceTokens:

    @pytest.mark.parametrize("token,expected", [
        ("5k", 5.0),
        ("10km", 10.0),
        ("21.1k", 21.1),
        ("42,195km", 42.195),
        ("10K", 10.0),
    ])
    def test_distance_formats(self, token, expected):
        assert parse_distance_km_token(token) == pytest.approx(expected)

    @pytest.mark.parametrize("token", ["45:00", "kms", "5kg", "0k"])
    def test_not_a_distance(self, token):
        assert parse_distance_km_token(token) is None


class TestExtractRaceSamples:

    def test_portuguese_sentence(self):
        samples = extract_race_samples("10k em 45:00, meia 21km 1h40m")
        assert [(s.label, s.distance_meters, s.time_seconds) for s in samples] == [
            ("10k", 10000, 2700),
            ("21k", 21000, 6000),
        ]

    def test_split_number_and_unit(self):
        samples = extract_race_samples("fiz 10 km em 50:00")
        assert len(samples) == 1
        assert samples[0].distance_meters == 10000
        assert samples[0].time_seconds == 3000

    def test_time_never_shared_between_distances(self):
        samples = extract_race_samples("5k 10k 45:00")
        assert [s.label for s in samples] == ["10k"]

    def test_lookahead_window_is_bounded(self):
        filler = " ".join(["word"] * LOOKAHEAD_TOKENS)
        assert extract_race_samples(f"10k {filler} 45:00") == []

    @pytest.mark.parametrize("text", [None, "", "just started running", "45:00 no distance"])
    def test_no_pairs(self, text):
        assert extract_race_samples(text) == []

    def test_decimal_label(self):
        samples = extract_race_samples("21.1k 1:45:00")
        assert samples[0].label == "21.1k"
        assert samples[0].distance_meters == pytest.approx(21100)
