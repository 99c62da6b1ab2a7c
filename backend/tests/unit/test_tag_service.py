"""Tests for TagService statistics, usage and suggestions."""

import pytest

from domains.core.exceptions import ValidationError
from domains.record_hub.services.record_service import RecordService
from domains.record_hub.services.tag_service import TagService, match_score


async def seed(record_service: RecordService, *contents: str) -> None:
    for content in contents:
        await record_service.create(content)


class TestMatchScore:
    """Tests for match_score."""

    def test_exact(self):
        """An exact match scores 100."""
        assert match_score("cafe", "cafe") == 100.0

    def test_prefix_prefers_shorter_tags(self):
        """Closer-length prefix matches score higher, between 50 and 99."""
        short = match_score("cafe", "caf")
        long = match_score("cafeteria", "caf")
        assert short == pytest.approx(50 + 49 * 3 / 4)
        assert long == pytest.approx(50 + 49 * 3 / 9)
        assert 50 < long < short < 99

    def test_no_match(self):
        """Non-matching tags score 0."""
        assert match_score("car", "caf") == 0.0


class TestTagService:
    """Tests for TagService."""

    @pytest.mark.asyncio
    async def test_statistics(self, record_service: RecordService, tag_service: TagService):
        """Statistics come back count-descending, tag-ascending."""
        await seed(record_service, "b a", "a c", "c")
        stats = await tag_service.statistics()
        assert [(s.tag, s.count) for s in stats] == [("a", 2), ("c", 2), ("b", 1)]

    @pytest.mark.asyncio
    async def test_usage_sorted_by_tag(self, record_service: RecordService, tag_service: TagService):
        """Usage can be listed alphabetically."""
        await seed(record_service, "b a", "a c", "c")
        usage = await tag_service.usage(sort_by="tag", sort_order="asc")
        assert [s.tag for s in usage] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_usage_ascending_count_keeps_tag_order(
        self, record_service: RecordService, tag_service: TagService
    ):
        """Ties on count stay alphabetical whatever the direction."""
        await seed(record_service, "b a", "a c", "c")
        usage = await tag_service.usage(sort_by="usage", sort_order="asc")
        assert [(s.tag, s.count) for s in usage] == [("b", 1), ("a", 2), ("c", 2)]

    @pytest.mark.asyncio
    async def test_usage_pagination(self, record_service: RecordService, tag_service: TagService):
        """limit and offset slice the sorted list."""
        await seed(record_service, "a b c d")
        usage = await tag_service.usage(sort_by="tag", limit=2, offset=1, sort_order="asc")
        assert [s.tag for s in usage] == ["b", "c"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [
        {"sort_by": "popularity"},
        {"sort_order": "up"},
        {"offset": -1},
        {"limit": -1},
    ])
    async def test_usage_invalid(self, tag_service: TagService, kwargs):
        """Bad arguments are validation errors."""
        with pytest.raises(ValidationError):
            await tag_service.usage(**kwargs)

    @pytest.mark.asyncio
    async def test_suggest(self, record_service: RecordService, tag_service: TagService):
        """Suggestions are ranked by score, then usage."""
        await seed(record_service, "cafe x", "cafe y", "cafeteria", "car")
        suggestions = await tag_service.suggest("CAF")
        assert [s.tag for s in suggestions] == ["cafe", "cafeteria"]
        assert suggestions[0].count == 2

    @pytest.mark.asyncio
    async def test_suggest_exact_first(self, record_service: RecordService, tag_service: TagService):
        """An exact match outranks longer tags with more usage."""
        await seed(record_service, "cafeteria a", "cafeteria b", "cafeteria c", "cafe")
        suggestions = await tag_service.suggest("Café")
        assert suggestions[0].tag == "cafe"
        assert suggestions[0].score == 100.0

    @pytest.mark.asyncio
    async def test_suggest_limit(self, record_service: RecordService, tag_service: TagService):
        """The limit caps the number of suggestions."""
        await seed(record_service, "ab abc abcd abcde")
        assert len(await tag_service.suggest("a", limit=2)) == 2

    @pytest.mark.asyncio
    async def test_suggest_blank_prefix(self, record_service: RecordService, tag_service: TagService):
        """A blank prefix suggests nothing."""
        await seed(record_service, "a")
        assert await tag_service.suggest("   ") == []
