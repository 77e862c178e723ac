"""Bitap approximate string matching.

Scores run from 0.0 (exact) to 1.0 (unrelated) and combine two penalties:
the fraction of pattern characters that needed an edit, and how far from the
expected location the match starts (scaled by ``distance``).
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Patterns longer than this are searched in chunks.
MAX_BITS = 32

# Smallest score reported for a non-identical match, so that only full
# equality scores 0.0.
MIN_SCORE = 0.001


@dataclass(frozen=True)
class BitapOptions:
    location: int = 0
    distance: int = 100
    threshold: float = 0.3
    min_match_char_length: int = 2
    find_all_matches: bool = False
    ignore_location: bool = False


@dataclass(frozen=True)
class BitapResult:
    is_match: bool
    score: float
    indices: list[tuple[int, int]] = field(default_factory=list)


NO_MATCH = BitapResult(is_match=False, score=1.0)


def compute_score(
    pattern_len: int,
    errors: int = 0,
    current_location: int = 0,
    expected_location: int = 0,
    distance: int = 100,
    ignore_location: bool = False,
) -> float:
    """Score a candidate match with ``errors`` edits found at ``current_location``."""
    accuracy = errors / pattern_len
    if ignore_location:
        return accuracy

    proximity = abs(expected_location - current_location)
    if not distance:
        return 1.0 if proximity else accuracy
    return accuracy + proximity / distance


def pattern_alphabet(pattern: str) -> dict[str, int]:
    """Map each pattern character to the bitmask of positions it occupies."""
    mask: dict[str, int] = {}
    length = len(pattern)
    for i, char in enumerate(pattern):
        mask[char] = mask.get(char, 0) | (1 << (length - i - 1))
    return mask


def match_mask_to_indices(
    match_mask: list[int], min_match_char_length: int = 1
) -> list[tuple[int, int]]:
    """Collapse a per-character match mask into inclusive (start, end) runs."""
    indices = []
    start = -1
    for i, matched in enumerate(match_mask):
        if matched and start == -1:
            start = i
        elif not matched and start != -1:
            end = i - 1
            if end - start + 1 >= min_match_char_length:
                indices.append((start, end))
            start = -1

    if match_mask and match_mask[-1] and len(match_mask) - start >= min_match_char_length:
        indices.append((start, len(match_mask) - 1))
    return indices


def bitap_search(
    text: str,
    pattern: str,
    alphabet: dict[str, int],
    options: BitapOptions,
    location_offset: int = 0,
) -> BitapResult:
    """
    Search ``text`` for an approximate occurrence of ``pattern``.

    Args:
        text: Text to search (already case-normalised)
        pattern: Pattern of at most MAX_BITS characters
        alphabet: Output of pattern_alphabet(pattern)
        options: Matching options
        location_offset: Added to the expected location (used for chunked patterns)

    Returns:
        BitapResult; ``score`` is the best accepted score when ``is_match``
    """
    pattern_len = len(pattern)
    text_len = len(text)
    expected_location = max(0, min(options.location + location_offset, text_len))
    distance = options.distance
    ignore_location = options.ignore_location

    current_threshold = options.threshold
    best_location = expected_location
    match_mask = [0] * text_len

    # Exact occurrences tighten the threshold before the fuzzy pass.
    index = text.find(pattern, best_location)
    while index > -1:
        score = compute_score(
            pattern_len,
            current_location=index,
            expected_location=expected_location,
            distance=distance,
            ignore_location=ignore_location,
        )
        current_threshold = min(score, current_threshold)
        best_location = index + pattern_len
        for i in range(index, index + pattern_len):
            match_mask[i] = 1
        index = text.find(pattern, best_location)

    best_location = -1
    last_bits: list[int] = []
    bin_max = pattern_len + text_len
    mask = 1 << (pattern_len - 1)

    for errors in range(pattern_len):
        # Binary search for how far from the expected location a match with
        # this many errors can still sit under the current threshold.
        bin_min = 0
        bin_mid = bin_max
        while bin_min < bin_mid:
            score = compute_score(
                pattern_len,
                errors=errors,
                current_location=expected_location + bin_mid,
                expected_location=expected_location,
                distance=distance,
                ignore_location=ignore_location,
            )
            if score <= current_threshold:
                bin_min = bin_mid
            else:
                bin_max = bin_mid
            bin_mid = (bin_max - bin_min) // 2 + bin_min

        bin_max = bin_mid

        start = max(1, expected_location - bin_mid + 1)
        if options.find_all_matches:
            finish = text_len
        else:
            finish = min(expected_location + bin_mid, text_len) + pattern_len

        bits = [0] * (finish + 2)
        bits[finish + 1] = (1 << errors) - 1

        j = finish
        while j >= start:
            current_location = j - 1
            if current_location < text_len:
                char_match = alphabet.get(text[current_location], 0)
                match_mask[current_location] = 1 if char_match else 0
            else:
                char_match = 0

            bits[j] = ((bits[j + 1] << 1) | 1) & char_match

            if errors:
                prev_next = last_bits[j + 1] if j + 1 < len(last_bits) else 0
                prev_here = last_bits[j] if j < len(last_bits) else 0
                bits[j] |= ((prev_next | prev_here) << 1) | 1 | prev_next

            if bits[j] & mask:
                final_score = compute_score(
                    pattern_len,
                    errors=errors,
                    current_location=current_location,
                    expected_location=expected_location,
                    distance=distance,
                    ignore_location=ignore_location,
                )
                if final_score <= current_threshold:
                    current_threshold = final_score
                    best_location = current_location
                    if best_location <= expected_location:
                        break
                    start = max(1, 2 * expected_location - best_location)
            j -= 1

        # No better match is possible with one more error.
        score = compute_score(
            pattern_len,
            errors=errors + 1,
            current_location=expected_location,
            expected_location=expected_location,
            distance=distance,
            ignore_location=ignore_location,
        )
        if score > current_threshold:
            break

        last_bits = bits

    if best_location < 0:
        return NO_MATCH

    indices = match_mask_to_indices(match_mask, options.min_match_char_length)
    if not indices:
        return NO_MATCH

    return BitapResult(
        is_match=True,
        score=max(MIN_SCORE, current_threshold),
        indices=indices,
    )


class BitapPattern:
    """A compiled, case-insensitive pattern that can be matched against many texts."""

    def __init__(self, pattern: str, options: BitapOptions | None = None):
        self.options = options or BitapOptions()
        self.pattern = pattern.lower()
        self.chunks: list[tuple[str, dict[str, int], int]] = []

        length = len(self.pattern)
        if length <= MAX_BITS:
            self._add_chunk(self.pattern, 0)
        else:
            remainder = length % MAX_BITS
            end = length - remainder
            for start in range(0, end, MAX_BITS):
                self._add_chunk(self.pattern[start:start + MAX_BITS], start)
            if remainder:
                start = length - MAX_BITS
                self._add_chunk(self.pattern[start:], start)

    def _add_chunk(self, chunk: str, start_index: int) -> None:
        self.chunks.append((chunk, pattern_alphabet(chunk), start_index))

    def search_in(self, text: str) -> BitapResult:
        """Match this pattern against ``text`` (lowercased here)."""
        if not self.pattern:
            return NO_MATCH

        text = text.lower()
        if self.pattern == text:
            return BitapResult(is_match=True, score=0.0, indices=[(0, len(text) - 1)])

        if len(self.chunks) == 1:
            chunk, alphabet, start_index = self.chunks[0]
            return bitap_search(text, chunk, alphabet, self.options, start_index)

        total_score = 0.0
        all_indices: list[tuple[int, int]] = []
        has_matches = False
        for chunk, alphabet, start_index in self.chunks:
            result = bitap_search(text, chunk, alphabet, self.options, start_index)
            if result.is_match:
                has_matches = True
                all_indices.extend(result.indices)
            total_score += result.score

        score = total_score / len(self.chunks)
        if not has_matches or score > self.options.threshold:
            return NO_MATCH
        return BitapResult(is_match=True, score=score, indices=all_indices)
