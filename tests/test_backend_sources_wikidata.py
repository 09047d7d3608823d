import requests

from backend.models import FetchOptions
from backend.sources.wikidata import WikidataSource, claim_date, is_film

API = "https://wd.test/w/api.php"


def _item(qid: str) -> dict:
    return {"type": "wikibase-entityid", "value": {"id": qid}}


def _claim(datavalue: dict) -> dict:
    return {"mainsnak": {"datavalue": datavalue}}


INCEPTION = {
    "labels": {"en": {"value": "Inception"}, "es": {"value": "Origen"}},
    "descriptions": {"en": {"value": "2010 film by Christopher Nolan"}},
    "claims": {
        "P31": [_claim(_item("Q11424"))],
        "P345": [_claim({"type": "string", "value": "tt1375666"})],
        "P577": [_claim({"type": "time", "value": {"time": "+2010-07-08T00:00:00Z"}})],
        "P136": [_claim(_item("Q471839")), _claim(_item("Q496523"))],
        "P57": [_claim(_item("Q25191"))],
        "P161": [_claim(_item("Q38111"))],
    },
}

LABELS = {
    "Q471839": {"labels": {"en": {"value": "science fiction film"}}},
    "Q496523": {"labels": {"es": {"value": "película de atracos"}}},
    "Q25191": {"labels": {"en": {"value": "Christopher Nolan"}}},
    "Q38111": {"labels": {"en": {"value": "Leonardo DiCaprio"}}},
}


def _router(url, params):
    assert url == API
    assert params["format"] == "json"
    action = params["action"]
    if action == "query":
        assert params["srsearch"] in ("haswbstatement:P4947=27205", "haswbstatement:P345=tt1375666")
        return {"query": {"search": [{"title": "Q25188"}]}}
    if action == "wbgetentities":
        ids = params["ids"].split("|")
        if ids == ["Q25188"]:
            return {"entities": {"Q25188": INCEPTION}}
        return {"entities": {qid: LABELS[qid] for qid in ids}}
    raise AssertionError(params)


def test_claim_helpers():
    assert claim_date(INCEPTION, "P577") == "2010-07-08"
    assert is_film(INCEPTION) is True
    assert is_film({"claims": {"P31": [_claim(_item("Q5"))]}}) is False


def test_fetch_by_qid_resolves_labels_in_one_batch(fake_http):
    mock = fake_http(_router)
    record = WikidataSource(api_url=API).get_movie_metadata("Q25188", FetchOptions(include_cast=True, language="es"))

    assert record is not None
    assert record.title == "Origen"
    assert record.overview == "2010 film by Christopher Nolan"
    assert record.release_date == "2010-07-08"
    assert record.genres == ["science fiction film", "película de atracos"]
    assert record.director == "Christopher Nolan"
    assert [c.name for c in record.cast or []] == ["Leonardo DiCaprio"]
    assert record.external_ids == {"wikidata": "Q25188", "imdb": "tt1375666"}
    assert record.source == "Wikidata"

    label_calls = [c for c in mock.calls if c.params.get("props") == "labels"]
    assert len(label_calls) == 1
    assert label_calls[0].params["languages"] == "es|en"


def test_fetch_by_tmdb_and_imdb_ids(fake_http):
    fake_http(_router)
    source = WikidataSource(api_url=API)

    assert source.get_movie_metadata("27205") is not None
    record = source.get_movie_metadata("tt1375666")
    assert record is not None and record.id == "Q25188"
    assert record.title == "Inception"
    assert record.cast is None


def test_fetch_free_text_is_absent(no_network):
    assert WikidataSource(api_url=API).get_movie_metadata("Inception") is None


def test_search_keeps_only_films(fake_http):
    def router(url, params):
        if params["action"] == "wbsearchentities":
            return {"search": [{"id": "Q25188", "label": "Inception"}, {"id": "Q999", "label": "Inception (album)"}]}
        assert params["ids"] == "Q25188|Q999"
        return {
            "entities": {
                "Q25188": INCEPTION,
                "Q999": {"claims": {"P31": [_claim(_item("Q482994"))]}},
            }
        }

    fake_http(router)
    results = WikidataSource(api_url=API).search_movies("Inception")
    assert [(r.id, r.title, r.release_date) for r in results] == [("Q25188", "Inception", "2010-07-08")]


def test_no_api_key_needed():
    assert WikidataSource(api_url=API).is_configured is True


def test_connection_error_is_absent_and_unavailable(fake_http):
    mock = fake_http(lambda url, params: requests.ConnectionError("wikidata down"))
    source = WikidataSource(api_url=API)

    assert source.get_movie_metadata("Q25188") is None
    assert source.get_movie_metadata("27205") is None
    assert source.search_movies("inception") == []
    assert source.is_available() is False
    assert len(mock.calls) == 4
