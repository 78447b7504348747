"""Unit tests for content density and adaptive target sizing."""

from chunking.config import ChunkingConfig
from chunking.segmenter import segment_text
from chunking.sizing import adaptive_target, content_density, upcoming_text

PROSE = "The quick brown fox jumps over the lazy dog near the river bank. " * 10
CODE  = "if(x){y=f(1,2);}\n" * 20


def _config(**overrides):
    values = dict(target_chunk_size=1000, min_chunk_size=200, max_chunk_size=2000,
                  enable_adaptive_sizing=True)
    values.update(overrides)
    return ChunkingConfig(**values)


def test_density_of_prose_is_low():
    assert content_density(PROSE) < 0.02


def test_density_of_code_is_high():
    assert content_density(CODE) > 0.1


def test_density_of_empty_text_is_zero():
    assert content_density("") == 0.0


def test_disabled_adaptive_sizing_returns_target():
    config = _config(enable_adaptive_sizing=False)
    assert adaptive_target(CODE, config) == 1000
    assert adaptive_target(PROSE, config) == 1000


def test_dense_text_shrinks_target_at_most_by_half():
    assert adaptive_target(CODE, _config()) == 500


def test_dense_text_target_never_below_min():
    assert adaptive_target(CODE, _config(min_chunk_size=800)) == 800


def test_narrative_text_grows_target():
    assert adaptive_target(PROSE, _config()) == 1300


def test_growth_is_capped_by_max_chunk_size():
    assert adaptive_target(PROSE, _config(max_chunk_size=1100)) == 1100


def test_moderate_density_keeps_target():
    text = "In 2023 the team shipped version 4 of the reporting tool to every regional office."
    assert 0.02 <= content_density(text) <= 0.1
    assert adaptive_target(text, _config()) == 1000


def test_upcoming_text_stops_once_limit_is_covered():
    units = segment_text("aaaa\nbbbb\ncccc\ndddd")
    assert upcoming_text(units, 1, 6) == "bbbb\ncccc"
    assert upcoming_text(units, 3, 100) == "dddd"
