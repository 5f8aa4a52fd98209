"""Test link normalization and harvesting."""

import pytest

from refminer.ingest import normalize_link, harvest_links, is_archive_link


SAMPLE_LINKS = [
    "//example.com/a",
    "http://x.com/a#sec1",
    "https://example.org/path/",
    "/relative/path/",
    "http://m.imdb.com/title/tt0083658/",
    "http://uk.imdb.com/title/tt0083658#plot",
    "http://www.imdb.de/name/nm0000631",
    "//www.imdb.com/title/tt0083658",
    "not a url at all",
    "",
    "#only-fragment",
    "///triple",
    "  http://padded.example.com/x  ",
    "http://x.com/a #sec",
    "/ /x",
    "http://x.com/ ",
    "http://x.com/a\f#sec",
    "// ",
]


def test_protocol_relative_gets_http():
    assert normalize_link("//example.com/a") == "http://example.com/a"


def test_fragment_is_dropped():
    assert normalize_link("http://x.com/a#sec1") == "http://x.com/a"


def test_slashes_trimmed():
    assert normalize_link("https://example.org/path/") == "https://example.org/path"
    assert normalize_link("/relative/path/") == "relative/path"


def test_whitespace_exposed_by_trimming_is_removed():
    assert normalize_link("http://x.com/a #sec") == "http://x.com/a"
    assert normalize_link("/ /x") == "x"
    assert normalize_link("http://x.com/ ") == "http://x.com"


def test_harvest_merges_links_differing_in_edge_whitespace():
    assert harvest_links(["http://x.com/a #sec", "http://x.com/a"]) == ["http://x.com/a"]


def test_imdb_mirrors_collapse_to_canonical_host():
    assert normalize_link("http://m.imdb.com/title/tt0083658/") == "http://www.imdb.com/title/tt0083658"
    assert normalize_link("http://uk.imdb.com/title/tt0083658#plot") == "http://www.imdb.com/title/tt0083658"
    assert normalize_link("http://www.imdb.de/name/nm0000631") == "http://www.imdb.com/name/nm0000631"


def test_non_imdb_hosts_untouched():
    assert normalize_link("http://imdb-fans.example.com/page") == "http://imdb-fans.example.com/page"


def test_malformed_input_passes_through_trimmed():
    assert normalize_link("not a url at all") == "not a url at all"
    assert normalize_link("") == ""
    assert normalize_link(None) == ""


@pytest.mark.parametrize("raw", SAMPLE_LINKS)
def test_normalization_is_idempotent(raw):
    once = normalize_link(raw)
    assert normalize_link(once) == once, f"Not idempotent for {raw!r}: {once!r}"


def test_archive_links_detected():
    assert is_archive_link("https://web.archive.org/web/2015/http://example.com")
    assert not is_archive_link("http://example.com/archive")


def test_harvest_dedupes_after_normalization():
    """Links that only differ before normalization are fetched once."""
    raw = [
        "//example.com/a",
        "http://example.com/a#top",
        "http://example.com/a/",
        "http://example.com/b",
        "https://web.archive.org/web/2015/http://example.com/c",
        "http://m.imdb.com/title/tt1",
        "http://www.imdb.com/title/tt1/",
    ]
    links = harvest_links(raw)

    assert links == [
        "http://example.com/a",
        "http://example.com/b",
        "http://www.imdb.com/title/tt1",
    ]
    assert len(links) == len({normalize_link(r) for r in raw if "archive.org" not in r})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
