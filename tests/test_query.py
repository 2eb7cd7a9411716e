from tourdesk.app.services.query import encode, query_to_search, search_to_query


def test_search_to_query_empty():
    assert search_to_query() == {}
    assert search_to_query("") == {}
    assert search_to_query(None) == {}


def test_search_to_query_simple():
    assert search_to_query("?a=1") == {"a": "1"}
    assert search_to_query("a=1&b=") == {"a": "1", "b": ""}


def test_search_to_query_nested():
    query = search_to_query(
        "?hotels%5B0%5D%5Bhotel_id%5D=1&hotels%5B1%5D%5Bhotel_id%5D=2&tags[]=a&tags[]=b"
    )
    assert query == {
        "hotels": [{"hotel_id": "1"}, {"hotel_id": "2"}],
        "tags": ["a", "b"],
    }


def test_search_to_query_keeps_numeric_top_level_keys():
    assert search_to_query("?0=a&1=b") == {"0": "a", "1": "b"}


def test_query_to_search_empty():
    assert query_to_search() == ""
    assert query_to_search({}) == ""


def test_query_to_search_simple():
    assert query_to_search({"a": "1"}) == "?a=1"


def test_query_to_search_nested_and_skips_none():
    search = query_to_search({"cabs": [{"cab_type_id": 2, "note": None}], "all": True})
    assert search == "?cabs%5B0%5D%5Bcab_type_id%5D=2&all=true"


def test_encode_escapes_values():
    assert encode({"start_date": "2024-01-01 12:00:01"}) == "start_date=2024-01-01%2012%3A00%3A01"


def test_search_to_query_zero_padded_indexes():
    assert search_to_query("?a[01]=x&a[0]=y") == {"a": ["y", "x"]}


def test_search_to_query_large_indexes_stay_a_mapping():
    assert search_to_query("?a[25]=x") == {"a": {"25": "x"}}
