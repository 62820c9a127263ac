from four_seasons_catalog.search.filters import SearchFilters
from four_seasons_catalog.search.matcher import (
    filter_compounds,
    matches_developer,
    matches_location,
    matches_query,
    paginate,
)


def _compound(i, title, **extra):
    record = {"id": i, "title": {"rendered": title}, "acf": {}}
    record.update(extra)
    return record


def test_query_matches_title_case_insensitively():
    compounds = [
        _compound(1, "Skyline Towers"),
        _compound(2, "Palm Parks"),
        _compound(3, "Green Valley"),
        _compound(4, "SKY gardens"),
    ]
    result = filter_compounds(compounds, SearchFilters(query="Skyline"))
    assert [c["id"] for c in result.compounds] == [1]
    assert result.total_matches == 1
    assert result.total_pages == 1


def test_query_matches_names_and_description():
    compound = _compound(
        1,
        "Alpha",
        locationName="New Cairo",
        developerName="Palm Hills",
        content={"rendered": "<p>Lagoon views</p>"},
    )
    assert matches_query(compound, "cairo")
    assert matches_query(compound, "palm")
    assert matches_query(compound, "lagoon")
    assert not matches_query(compound, "zayed")
    assert matches_query(compound, "")


def test_pagination_of_matches():
    compounds = [_compound(i, f"Compound {i}") for i in range(1, 26)]
    result = filter_compounds(compounds, SearchFilters(page=2, page_size=12))
    assert [c["id"] for c in result.compounds] == list(range(13, 25))
    assert result.total_matches == 25
    assert result.total_pages == 3
    assert result.page == 2


def test_page_past_end_is_empty():
    compounds = [_compound(i, "x") for i in range(3)]
    result = filter_compounds(compounds, SearchFilters(page=5))
    assert result.compounds == []
    assert result.total_pages == 1


def test_no_matches_reports_zero_pages():
    result = filter_compounds([_compound(1, "Alpha")], SearchFilters(query="zzz"))
    assert result.total_matches == 0
    assert result.total_pages == 0


def test_sentinel_selectors_keep_everything():
    compounds = [_compound(1, "A"), _compound(2, "B")]
    result = filter_compounds(
        compounds, SearchFilters(location="all-locations", developer="all-developers")
    )
    assert result.total_matches == 2


def test_location_priority_chain():
    resolved = _compound(1, "A", locationName="New Cairo")
    assert matches_location(resolved, "cairo")
    assert not matches_location(resolved, "zayed")

    # Resolved name wins even when the ACF object would match.
    shadowed = _compound(
        2, "B", locationName="Zayed", acf={"location": {"slug": "new-cairo", "name": "New Cairo"}}
    )
    assert not matches_location(shadowed, "new-cairo")

    embedded = _compound(3, "C", acf={"location": {"slug": "new-cairo", "name": "New Cairo"}})
    assert matches_location(embedded, "new-cairo")
    assert matches_location(embedded, "Cairo")

    plain = _compound(4, "D", acf={"location": "new-cairo"})
    assert matches_location(plain, "new-cairo")
    assert not matches_location(plain, "cairo")


def test_location_id_list_needs_known_slug():
    linked = _compound(5, "E", acf={"location_to_location": [3, 9]})
    assert matches_location(linked, "new-cairo", {"new-cairo": 3})
    assert not matches_location(linked, "zayed", {"zayed": 4})
    assert not matches_location(linked, "unknown", {"new-cairo": 3})
    assert not matches_location(linked, "new-cairo")
    assert not matches_location(_compound(6, "F"), "new-cairo", {"new-cairo": 3})


def test_developer_priority_chain():
    assert matches_developer(_compound(1, "A", developerName="Palm Hills"), "palm")
    assert not matches_developer(_compound(1, "A", developerName="Palm Hills"), "sodic")

    embedded = _compound(2, "B", acf={"developer": {"post_name": "sodic", "post_title": "SODIC"}})
    assert matches_developer(embedded, "sodic")
    assert matches_developer(embedded, "SOD")
    assert not matches_developer(_compound(3, "C"), "sodic")


def test_filters_combine():
    compounds = [
        _compound(1, "Skyline", locationName="New Cairo", developerName="Palm Hills"),
        _compound(2, "Skyline West", locationName="Zayed", developerName="Palm Hills"),
        _compound(3, "Skyline East", locationName="New Cairo", developerName="SODIC"),
    ]
    result = filter_compounds(
        compounds, SearchFilters(query="skyline", location="cairo", developer="palm")
    )
    assert [c["id"] for c in result.compounds] == [1]


def test_failure_yields_empty_flagged_page():
    result = filter_compounds([None], SearchFilters(query="x"))
    assert result.compounds == []
    assert result.total_matches == 0
    assert result.failed
    assert "failed" not in result.to_dict()


def test_paginate_clamps_page():
    assert paginate([1, 2, 3], 0, 2) == [1, 2]
    assert paginate([1, 2, 3], 2, 2) == [3]


def test_query_matches_description_text_not_markup():
    compound = _compound(1, "Alpha", content={"rendered": "<p><strong>Lagoon</strong> views</p>"})
    assert matches_query(compound, "lagoon views")
    assert not matches_query(compound, "strong")
    assert not matches_query(compound, "<p>")
