from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import SearchUnavailableError
from openalex_feed import _parse_works_payload, normalize_doi, rebuild_abstract, search_works


def _work(work_id: str = "https://openalex.org/W1", **overrides) -> dict:
    work = {
        "id": work_id,
        "display_name": "Battery Cooling",
        "publication_year": 2022,
        "doi": "https://doi.org/10.1/xyz",
        "authorships": [
            {"author": {"display_name": "Jane Doe"}},
            {"author": {"display_name": "John Roe"}},
        ],
        "primary_location": {"source": {"display_name": "J. Energy"}},
        "abstract_inverted_index": {"Cooling": [0], "matters": [1]},
    }
    work.update(overrides)
    return work


def _mock_resp(payload, ok: bool = True, status_code: int = 200) -> MagicMock:
    mock = MagicMock()
    mock.ok = ok
    mock.status_code = status_code
    mock.text = "upstream said no"
    mock.json.return_value = payload
    return mock


def test_rebuild_abstract_reorders_tokens() -> None:
    assert rebuild_abstract({"quick": [1], "The": [0], "fox": [2]}) == "The quick fox"


def test_rebuild_abstract_repeated_word() -> None:
    assert rebuild_abstract({"the": [0, 2], "cat": [1], "mat": [3]}) == "the cat the mat"


def test_rebuild_abstract_empty_index() -> None:
    assert rebuild_abstract({}) == ""


def test_rebuild_abstract_gaps_become_empty_slots() -> None:
    assert rebuild_abstract({"a": [0], "c": [2]}) == "a  c"


def test_rebuild_abstract_ignores_malformed_positions() -> None:
    assert rebuild_abstract({"a": [0], "b": "oops", "c": [-1, 1]}) == "a c"


@pytest.mark.parametrize("raw, expected", [
    ("https://doi.org/10.1/xyz", "10.1/xyz"),
    ("http://doi.org/10.1/xyz", "10.1/xyz"),
    ("HTTPS://DOI.ORG/10.1/xyz", "10.1/xyz"),
    ("10.1/xyz", "10.1/xyz"),
    ("", None),
    (None, None),
])
def test_normalize_doi(raw, expected) -> None:
    assert normalize_doi(raw) == expected


def test_parse_works_payload_full_record() -> None:
    papers = _parse_works_payload({"results": [_work()]})

    assert len(papers) == 1
    paper = papers[0]
    assert paper.id == "https://openalex.org/W1"
    assert paper.title == "Battery Cooling"
    assert paper.authors == ("Jane Doe", "John Roe")
    assert paper.year == 2022
    assert paper.venue == "J. Energy"
    assert paper.abstract == "Cooling matters"
    assert paper.doi == "10.1/xyz"
    assert paper.url == "https://doi.org/10.1/xyz"


def test_parse_works_payload_doi_from_ids_block() -> None:
    work = _work(doi=None, ids={"doi": "https://doi.org/10.2/abc"})
    paper = _parse_works_payload({"results": [work]})[0]

    assert paper.doi == "10.2/abc"
    assert paper.url == "https://doi.org/10.2/abc"


def test_parse_works_payload_url_falls_back_to_work_id() -> None:
    paper = _parse_works_payload({"results": [_work(doi=None)]})[0]

    assert paper.doi is None
    assert paper.url == "https://openalex.org/W1"


def test_parse_works_payload_sparse_record() -> None:
    work = {"id": "https://openalex.org/W9", "primary_location": None, "authorships": None}
    paper = _parse_works_payload({"results": [work]})[0]

    assert paper.title == "[No title]"
    assert paper.authors == ()
    assert paper.year is None
    assert paper.venue is None
    assert paper.abstract is None


def test_parse_works_payload_skips_nameless_authors_and_keeps_order() -> None:
    work = _work(authorships=[
        {"author": {"display_name": "Zed Last"}},
        {"author": {}},
        {},
        {"author": {"display_name": "  "}},
        {"author": {"display_name": "Amy First"}},
    ])
    paper = _parse_works_payload({"results": [work]})[0]

    assert paper.authors == ("Zed Last", "Amy First")


def test_parse_works_payload_drops_missing_and_duplicate_ids() -> None:
    payload = {"results": [_work("W1"), {"display_name": "No id"}, _work("W1"), _work("W2")]}
    papers = _parse_works_payload(payload)

    assert [p.id for p in papers] == ["W1", "W2"]


def test_parse_works_payload_rejects_non_object() -> None:
    with pytest.raises(SearchUnavailableError):
        _parse_works_payload([])


def test_search_works_sends_relevance_query() -> None:
    with patch("openalex_feed.requests.get", return_value=_mock_resp({"results": [_work()]})) as mock_get:
        papers = search_works("battery thermal management", limit=8)

    assert len(papers) == 1
    params = mock_get.call_args.kwargs["params"]
    assert params["search"] == "battery thermal management"
    assert params["per-page"] == 8
    assert params["sort"] == "relevance_score:desc"
    assert mock_get.call_args.kwargs["timeout"] > 0


def test_search_works_preserves_upstream_order() -> None:
    payload = {"results": [_work("W3"), _work("W1"), _work("W2")]}
    with patch("openalex_feed.requests.get", return_value=_mock_resp(payload)):
        papers = search_works("q", limit=3)

    assert [p.id for p in papers] == ["W3", "W1", "W2"]


def test_search_works_non_success_status_is_fatal() -> None:
    with patch("openalex_feed.requests.get", return_value=_mock_resp({}, ok=False, status_code=503)):
        with pytest.raises(SearchUnavailableError) as excinfo:
            search_works("q")

    assert excinfo.value.status_code == 503


def test_search_works_transport_error_is_fatal() -> None:
    with patch("openalex_feed.requests.get", side_effect=requests.Timeout("slow")) as mock_get:
        with pytest.raises(SearchUnavailableError):
            search_works("q")

    assert mock_get.call_count == 1


def test_search_works_malformed_json_is_fatal() -> None:
    resp = _mock_resp(None)
    resp.json.side_effect = ValueError("not json")
    with patch("openalex_feed.requests.get", return_value=resp):
        with pytest.raises(SearchUnavailableError):
            search_works("q")
