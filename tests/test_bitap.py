"""Tests for bitap approximate matching."""

from wandernest.search.bitap import (
    MAX_BITS,
    MIN_SCORE,
    BitapOptions,
    BitapPattern,
    compute_score,
    match_mask_to_indices,
    pattern_alphabet,
)


class TestComputeScore:
    """Tests for the error/proximity score."""

    def test_exact_at_expected_location(self):
        """Test that an exact match at the expected location scores zero."""
        assert compute_score(5, errors=0, current_location=0) == 0.0

    def test_errors_and_distance_add_up(self):
        """Test that error ratio and distance penalty are summed."""
        score = compute_score(4, errors=1, current_location=10, expected_location=0, distance=100)
        assert score == 0.25 + 0.1

    def test_ignore_location(self):
        """Test that ignoring location leaves only the error ratio."""
        assert compute_score(4, errors=1, current_location=50, ignore_location=True) == 0.25

    def test_zero_distance(self):
        """Test that with no distance any offset from the expected location is a full miss."""
        assert compute_score(4, errors=0, current_location=3, distance=0) == 1.0
        assert compute_score(4, errors=1, current_location=0, distance=0) == 0.25


class TestHelpers:
    """Tests for alphabet and match-mask helpers."""

    def test_pattern_alphabet(self):
        """Test that each character maps to the bit positions it occupies."""
        alphabet = pattern_alphabet("abca")
        assert alphabet["a"] == 0b1001
        assert alphabet["b"] == 0b0100
        assert alphabet["c"] == 0b0010

    def test_match_mask_to_indices(self):
        """Test that runs shorter than the minimum length are dropped."""
        mask = [1, 1, 0, 1, 0, 1, 1, 1]
        assert match_mask_to_indices(mask, 2) == [(0, 1), (5, 7)]
        assert match_mask_to_indices(mask, 1) == [(0, 1), (3, 3), (5, 7)]


class TestBitapPattern:
    """Tests for compiled pattern matching."""

    def setup_method(self):
        self.options = BitapOptions()

    def test_equality_scores_zero(self):
        """Test that full equality scores exactly 0.0."""
        result = BitapPattern("Tokyo", self.options).search_in("tokyo")
        assert result.is_match
        assert result.score == 0.0

    def test_prefix_scores_minimum(self):
        """Test that a prefix match scores the minimum non-zero score."""
        result = BitapPattern("tok", self.options).search_in("Tokyo")
        assert result.is_match
        assert result.score == MIN_SCORE
        assert (0, 2) in result.indices

    def test_case_insensitive(self):
        """Test that pattern and text case are ignored."""
        assert BitapPattern("KYOTO", self.options).search_in("Kyoto").score == 0.0

    def test_typo_within_threshold(self):
        """Test that a single substitution still matches under the threshold."""
        result = BitapPattern("tokio", self.options).search_in("tokyo")
        assert result.is_match
        assert 0 < result.score <= self.options.threshold

    def test_unrelated_text_does_not_match(self):
        """Test that unrelated text is rejected."""
        assert not BitapPattern("zzzz", self.options).search_in("tokyo").is_match

    def test_far_match_is_rejected(self):
        """Test that an exact occurrence too far past the start costs more than the threshold."""
        text = "x" * 60 + "bali"
        assert not BitapPattern("bali", self.options).search_in(text).is_match

    def test_ignore_location_finds_far_match(self):
        """Test that ignore_location accepts matches anywhere in the text."""
        options = BitapOptions(ignore_location=True)
        text = "x" * 60 + "bali"
        assert BitapPattern("bali", options).search_in(text).is_match

    def test_scores_stay_within_threshold(self):
        """Test that every accepted match scores at or below the threshold."""
        pattern = BitapPattern("barcelona", self.options)
        for text in ["barcelona spain", "barcelone", "barcalona", "the barcelona food scene"]:
            result = pattern.search_in(text)
            if result.is_match:
                assert result.score <= self.options.threshold

    def test_empty_pattern_never_matches(self):
        """Test that an empty pattern matches nothing."""
        assert not BitapPattern("", self.options).search_in("anything").is_match

    def test_long_pattern_is_chunked(self):
        """Test that patterns over 32 characters are split into chunks."""
        text = "a very long description of a coastal town with beaches"
        pattern = BitapPattern(text, self.options)
        assert len(pattern.chunks) > 1
        assert all(len(chunk) <= MAX_BITS for chunk, _, _ in pattern.chunks)
        assert pattern.search_in(text).score == 0.0
