"""Tests for tag normalization, validation, parsing and identity."""

import random
import uuid

import pytest

from domains.record_hub.core.identity import TAG_NAMESPACE, tag_identity
from domains.record_hub.core.normalizer import TagNormalizer, TagNormalizerConfig, normalize_tag
from domains.record_hub.core.parser import parse_tags
from domains.record_hub.core.validator import TagValidator


SAMPLES = [
    "Café",
    "  CAFÉ  ",
    "naïve   Résumé",
    "ПРОЕКТ",
    "Йогурт",
    "straße",
    "é",
    "ÅNGSTRÖM",
    "",
    "   ",
    "mixed\t\nwhitespace",
    "a \u0301",
    "\u0301 a",
    "\u18b2\u2007\u0a48",
    "\u0fbc\u2029\u1f8a",
    "x \u0301 y",
]


class TestTagNormalizer:
    """Tests for TagNormalizer."""

    def test_trims_and_lowercases(self, normalizer: TagNormalizer):
        """Surrounding whitespace is removed and case is folded."""
        assert normalizer.normalize("  Deadline ") == "deadline"

    def test_collapses_internal_whitespace(self, normalizer: TagNormalizer):
        """Runs of whitespace become a single space."""
        assert normalizer.normalize("a \t\n  b") == "a b"

    def test_strips_accents(self, normalizer: TagNormalizer):
        """Combining marks are removed after decomposition."""
        assert normalizer.normalize("Café") == "cafe"
        assert normalizer.normalize("naïve") == "naive"
        assert normalizer.normalize("é") == "e"

    def test_cyrillic_is_lowercased(self, normalizer: TagNormalizer):
        """Non-Latin scripts are case-folded too."""
        assert normalizer.normalize("ПРОЕКТ") == "проект"

    def test_cyrillic_short_i_loses_breve(self, normalizer: TagNormalizer):
        """й decomposes to и plus a combining breve, which is dropped."""
        assert normalizer.normalize("Йогурт") == "иогурт"

    def test_none_normalizes_to_empty(self, normalizer: TagNormalizer):
        """None is treated as empty input instead of raising."""
        assert normalizer.normalize(None) == ""

    @pytest.mark.parametrize("raw", SAMPLES)
    def test_idempotent(self, normalizer: TagNormalizer, raw: str):
        """Normalizing twice gives the same result as normalizing once."""
        once = normalizer.normalize(raw)
        assert normalizer.normalize(once) == once

    @pytest.mark.parametrize("raw, expected", [
        ("a \u0301", "a"),
        ("\u0301 a", "a"),
        ("x \u0301 y", "x y"),
        ("\u0fbc\u2029\u1f8a", "\u03b1"),
    ])
    def test_whitespace_left_by_removed_marks(self, normalizer: TagNormalizer, raw: str, expected: str):
        """Whitespace exposed by a stripped mark is trimmed and collapsed in the same pass."""
        assert normalizer.normalize(raw) == expected

    def test_idempotent_over_mixed_strings(self, normalizer: TagNormalizer):
        """Idempotence holds for short strings mixing letters, marks and whitespace."""
        alphabet = "a\u00c9\u0439 \u00df\t\u3000\u2007\u0301\u0308\u0a48\u1f8a\u0130\u200b"
        rng = random.Random(20240101)
        for _ in range(2000):
            raw = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 6)))
            once = normalizer.normalize(raw)
            assert normalizer.normalize(once) == once, repr(raw)

    def test_config_can_keep_case_and_accents(self):
        """Both folding steps can be switched off."""
        normalizer = TagNormalizer(TagNormalizerConfig(lowercase=False, remove_accents=False))
        assert normalizer.normalize(" Café ") == "Café"

    def test_module_level_helper(self):
        """normalize_tag uses the default configuration."""
        assert normalize_tag("CAFÉ") == "cafe"


class TestTagValidator:
    """Tests for TagValidator."""

    def test_valid_tag(self):
        """An ordinary word passes."""
        result = TagValidator().validate("deadline")
        assert result.is_valid
        assert result.errors == ()
        assert bool(result) is True

    def test_empty_tag(self):
        """Empty strings are rejected."""
        result = TagValidator().validate("")
        assert not result.is_valid
        assert len(result.errors) == 1

    def test_too_long(self):
        """Length above the limit is rejected."""
        validator = TagValidator(max_length=5)
        assert validator.validate("abcde").is_valid
        assert not validator.validate("abcdef").is_valid

    def test_default_max_length_is_100(self):
        """The default limit is 100 characters."""
        validator = TagValidator()
        assert validator.validate("a" * 100).is_valid
        assert not validator.validate("a" * 101).is_valid

    def test_control_and_format_characters(self):
        """Control (Cc) and format (Cf) characters are rejected."""
        validator = TagValidator()
        assert not validator.validate("ab\x00").is_valid
        assert not validator.validate("a\u200bb").is_valid

    def test_internal_whitespace(self):
        """A tag must be a single word."""
        result = TagValidator().validate("a b")
        assert not result.is_valid
        assert len(result.errors) == 1

    def test_errors_accumulate(self):
        """All violations are reported, not just the first."""
        result = TagValidator(max_length=2).validate("a\tb")
        assert not result.is_valid
        # too long, control character, whitespace
        assert len(result.errors) == 3

    def test_never_raises(self):
        """Validation reports problems through the result only."""
        result = TagValidator().validate("\x00" * 200)
        assert not result.is_valid


class TestParseTags:
    """Tests for parse_tags."""

    def test_splits_on_whitespace(self):
        """Any whitespace run separates tokens."""
        assert parse_tags("deadline  проект\tQ3\n") == ["deadline", "проект", "Q3"]

    def test_preserves_order_and_duplicates(self):
        """Deduplication is left to the tag factory."""
        assert parse_tags("b a b") == ["b", "a", "b"]

    def test_blank_content(self):
        """Blank or missing content yields no tokens."""
        assert parse_tags("") == []
        assert parse_tags("   \n ") == []
        assert parse_tags(None) == []

    def test_no_quoting(self):
        """Quotes are ordinary characters."""
        assert parse_tags('"a b"') == ['"a', 'b"']


class TestTagIdentity:
    """Tests for tag_identity."""

    def test_namespace_is_dns(self):
        """The namespace is the RFC 4122 DNS namespace."""
        assert TAG_NAMESPACE == uuid.NAMESPACE_DNS

    def test_deterministic(self):
        """The same value always yields the same id."""
        assert tag_identity("cafe") == tag_identity("cafe")
        assert tag_identity("cafe") == uuid.uuid5(uuid.NAMESPACE_DNS, "cafe")

    def test_known_value(self):
        """Ids are stable across processes and machines."""
        assert tag_identity("python.org") == uuid.UUID("886313e1-3b8a-5372-9b90-0c9aee199e5d")
        assert tag_identity("python.org").version == 5

    def test_distinct_values_distinct_ids(self):
        """Different normalized values produce different ids."""
        assert tag_identity("cafe") != tag_identity("café")
