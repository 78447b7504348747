"""Unit tests for fixed-window fallback chunking."""

from chunking.config import ChunkingConfig
from chunking.fallback import fallback_chunk, fallback_windows


def _config(**overrides):
    return ChunkingConfig(**overrides)


def test_blank_text_gives_no_chunks():
    assert fallback_chunk("", _config()) == []
    assert fallback_chunk(" \n\t ", _config()) == []


def test_short_text_is_a_single_stripped_chunk():
    assert fallback_chunk("   Text with whitespace   ", _config()) == ["Text with whitespace"]


def test_windows_advance_by_target_minus_overlap():
    windows = fallback_windows("A" * 5000, _config())
    assert windows == [(0, 2000), (1800, 3800), (3600, 5000)]


def test_adjacent_windows_share_overlap_characters():
    text = "".join(f"w{i:05d}" for i in range(1500))
    chunks = fallback_chunk(text, _config(target_chunk_size=1000, overlap=150))
    assert len(chunks) > 1
    for prev, cur in zip(chunks, chunks[1:]):
        assert cur[:150] == prev[-150:]


def test_breaks_at_sentence_end_past_half_window():
    text = "A" * 1200 + "First sentence. " + "B" * 1200 + "Second sentence. " + "C" * 1200
    chunks = fallback_chunk(text, _config())
    assert chunks[0] == "A" * 1200 + "First sentence."


def test_breaks_at_newline_past_half_window():
    text = "x" * 1500 + "\n" + "y" * 3000
    windows = fallback_windows(text, _config())
    assert windows[0] == (0, 1501)


def test_early_break_points_are_ignored():
    text = "Hi. " + "z" * 5000
    windows = fallback_windows(text, _config())
    assert windows[0] == (0, 2000)


def test_undersized_tail_is_folded_into_previous_window():
    windows = fallback_windows("A" * 10_000, _config(
        target_chunk_size=1000, min_chunk_size=500, max_chunk_size=2000,
    ))
    assert windows[-1] == (8800, 10_000)
    assert all(500 <= end - start <= 2000 for start, end in windows)


def test_overlap_not_smaller_than_target_still_terminates():
    windows = fallback_windows("A" * 3000, _config(
        target_chunk_size=1000, min_chunk_size=100, overlap=1500,
    ))
    assert windows == [(0, 1000), (1000, 2000), (2000, 3000)]


def test_every_character_is_covered():
    text = ("Sentence number one. " * 50 + "\n") * 8
    windows = fallback_windows(text, _config(target_chunk_size=700, min_chunk_size=100, overlap=0))
    assert windows[0][0] == 0
    assert windows[-1][1] == len(text)
    for (_, prev_end), (start, _) in zip(windows, windows[1:]):
        assert start == prev_end
