"""Unit tests for result normalisation."""

from truthseek.web.search_provider import normalize_result, normalize_results


class TestNormalizeResult:
    def test_plain_content_payload(self):
        result = normalize_result({"title": "T1", "url": "u1", "content": "c1", "score": 0.9}, "stubA")
        assert result.title == "T1"
        assert result.url == "u1"
        assert result.content == "c1"
        assert result.score == 0.9
        assert result.source == "stubA"
        assert result.metadata == {}

    def test_summary_wins_over_text(self):
        result = normalize_result({"summary": "short", "text": "long body"}, "exa")
        assert result.content == "short"

    def test_text_used_when_summary_missing(self):
        result = normalize_result({"summary": None, "text": "long body", "content": "c"}, "exa")
        assert result.content == "long body"

    def test_snippet_and_link_fallbacks(self):
        result = normalize_result({"title": "x", "link": "https://e.com", "snippet": "s"}, "serper")
        assert result.url == "https://e.com"
        assert result.content == "s"

    def test_relevance_score_preferred(self):
        result = normalize_result({"relevance_score": 0.0, "score": 0.7}, "p")
        assert result.score == 0.0

    def test_missing_fields_default_empty(self):
        result = normalize_result({}, "p")
        assert result.title == ""
        assert result.content == ""
        assert result.score == 0.0

    def test_metadata_is_copied(self):
        meta = {"likes": 3}
        result = normalize_result({"metadata": meta}, "twitter")
        meta["likes"] = 99
        assert result.metadata == {"likes": 3}


def test_normalize_results_handles_none():
    assert normalize_results(None, "p") == []
