import math
from copy import deepcopy

from backend.merge import merge, sanitize
from backend.models import BasicMovieInfo, CastMember, CrewMember, MovieRecord, VideoRef


def _video(key: str, name: str = "Trailer") -> VideoRef:
    return VideoRef(id=f"v-{key}", key=key, site="YouTube", type="Trailer", name=name)


def _primary() -> MovieRecord:
    return MovieRecord(
        id="custom-1",
        title="Inception",
        overview="Dreams within dreams.",
        runtime=148,
        genres=["Action", "Science Fiction"],
        cast=[CastMember(id="a1", name="Leonardo DiCaprio", character="Dom Cobb")],
        external_ids={"imdb": "tt1375666"},
        source="CustomDB",
    )


def _secondary() -> MovieRecord:
    return MovieRecord(
        id="27205",
        title="Inception (TMDB)",
        overview="Another overview",
        tagline="Your mind is the scene of the crime.",
        budget=160000000,
        genres=["action", "Adventure"],
        cast=[
            CastMember(id="t1", name="leonardo dicaprio", character="Cobb"),
            CastMember(id="t2", name="Tom Hardy", character="Eames"),
        ],
        crew=[CrewMember(id="c1", name="Christopher Nolan", job="Director", department="Directing")],
        videos=[_video("abc")],
        similar=[BasicMovieInfo(id="157336", title="Interstellar")],
        languages=["English"],
        external_ids={"imdb": "tt-other", "tmdb": "27205"},
        source="TMDB",
    )


def test_merge_fills_only_absent_scalars():
    target = merge(_primary(), _secondary())

    assert target.title == "Inception"
    assert target.overview == "Dreams within dreams."
    assert target.runtime == 148
    assert target.tagline == "Your mind is the scene of the crime."
    assert target.budget == 160000000
    assert target.languages == ["English"]


def test_merge_returns_target_instance():
    primary = _primary()
    assert merge(primary, _secondary()) is primary


def test_merge_external_ids_add_without_overwrite():
    target = merge(_primary(), _secondary())
    assert target.external_ids == {"imdb": "tt1375666", "tmdb": "27205"}


def test_merge_unions_collections_case_insensitively():
    target = merge(_primary(), _secondary())

    assert target.genres == ["Action", "Science Fiction", "Adventure"]
    assert [c.name for c in target.cast or []] == ["Leonardo DiCaprio", "Tom Hardy"]
    assert target.cast and target.cast[0].character == "Dom Cobb"
    assert [c.name for c in target.crew or []] == ["Christopher Nolan"]
    assert [m.id for m in target.similar or []] == ["157336"]


def test_merge_crew_key_uses_name_and_job():
    target = MovieRecord(
        id="1",
        title="X",
        crew=[CrewMember(id="c1", name="Christopher Nolan", job="Director")],
    )
    source = MovieRecord(
        id="2",
        title="X",
        crew=[
            CrewMember(id="c2", name="christopher nolan", job="director"),
            CrewMember(id="c3", name="Christopher Nolan", job="Writer"),
        ],
        source="OMDB",
    )
    merge(target, source)
    assert [(c.name, c.job) for c in target.crew or []] == [
        ("Christopher Nolan", "Director"),
        ("Christopher Nolan", "Writer"),
    ]


def test_merge_dedups_videos_by_key():
    target = MovieRecord(id="1", title="Dune", videos=[_video("same", "TMDB trailer")], source="TMDB")
    source = MovieRecord(
        id="2",
        title="Dune",
        videos=[_video("same", "YouTube copy"), _video("other")],
        source="YouTube",
    )
    merge(target, source)

    keys = [v.key for v in target.videos or []]
    assert keys == ["same", "other"]
    assert keys.count("same") == 1


def test_merge_fills_empty_plain_lists():
    target = MovieRecord(id="1", title="X", writers=[], keywords=None)
    source = MovieRecord(id="2", title="X", writers=["Jonathan Nolan"], keywords=["dream"], source="MovieLens")
    merge(target, source)
    assert target.writers == ["Jonathan Nolan"]
    assert target.keywords == ["dream"]


def test_merge_is_idempotent():
    once = merge(_primary(), _secondary())
    snapshot = deepcopy(once)
    twice = merge(once, _secondary())
    assert twice == snapshot


def test_merge_source_appended_only_on_contribution():
    target = merge(_primary(), _secondary())
    assert target.source == "CustomDB, TMDB"

    nothing_new = MovieRecord(id="x", title="Other", source="Wikidata")
    merge(target, nothing_new)
    assert target.source == "CustomDB, TMDB"


def test_merge_never_overwrites_present_fields():
    target = _primary()
    before = deepcopy(target)
    merge(target, _secondary())

    for name in ("id", "title", "overview", "runtime"):
        assert getattr(target, name) == getattr(before, name)
    assert target.cast and target.cast[0] == before.cast[0]  # type: ignore[index]


def test_sanitize_fills_collections_and_nan():
    record = MovieRecord(id="1", title="X", rating=math.nan, budget=None, genres=None)
    out = sanitize(record)

    assert out is not record
    assert out.rating == 0
    assert out.budget is None
    assert out.genres == []
    assert out.cast == [] and out.crew == [] and out.videos == [] and out.similar == []
    assert out.writers == [] and out.languages == [] and out.keywords == [] and out.production_companies == []

    assert math.isnan(record.rating or 0.0)
    assert record.genres is None


def test_sanitize_is_idempotent():
    record = MovieRecord(id="1", title="X", runtime=120, vote_count=None)
    once = sanitize(record)
    assert sanitize(once) == once
