import pytest
from movienight_core.tokens import CODE_ALPHABET, SeededRandomSource, SystemRandomSource


def test_system_codes_use_alphabet():
    rng = SystemRandomSource()
    for length in (4, 6):
        code = rng.code(length)
        assert len(code) == length
        assert set(code) <= set(CODE_ALPHABET)


def test_system_tokens_are_long_and_distinct():
    rng = SystemRandomSource()
    tokens = {rng.token() for _ in range(200)}
    assert len(tokens) == 200
    # 24 random bytes, urlsafe base64 without padding
    assert all(len(t) == 32 for t in tokens)


def test_seeded_source_is_reproducible():
    a, b = SeededRandomSource(42), SeededRandomSource(42)
    assert [a.code(4), a.token(), a.choice("xyz")] == [b.code(4), b.token(), b.choice("xyz")]


@pytest.mark.parametrize("rng", [SystemRandomSource(), SeededRandomSource(1)])
def test_choice(rng):
    items = ["a", "b", "c"]
    assert all(rng.choice(items) in items for _ in range(50))
    with pytest.raises(IndexError):
        rng.choice([])
