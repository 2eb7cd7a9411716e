from tourdesk.app.store.model import Entity, EntityCache, Meta, PageInfo, init


def _items(*ids, **fields):
    return [Entity(id=item_id, **fields) for item_id in ids]


def test_init_meta_defaults():
    cache = init()
    assert cache.page_info == PageInfo(total=0, current_page=1, last_page=1, from_=0, to=0)
    assert len(cache) == 0
    assert cache.get() == []


def test_insert_is_idempotent_per_id():
    cache = init(_items(1, 2, 3))
    cache = cache.insert(_items(2, 3, 4, 4))
    assert [item.id for item in cache.get()] == [1, 2, 3, 4]
    assert len(cache) == 4


def test_insert_keeps_latest_value():
    cache = init([Entity(id=1, name="old")])
    cache = cache.insert([Entity(id=1, name="new")])
    assert cache.get_item(1).name == "new"
    assert len(cache) == 1


def test_insert_keeps_first_seen_order():
    cache = init(_items(1, 2))
    cache = cache.insert(_items(1))
    assert [item.id for item in cache.get()] == [1, 2]


def test_insert_prepend():
    cache = init(_items(1, 2)).insert(_items(3), prepend=True)
    assert [item.id for item in cache.get()] == [3, 1, 2]


def test_insert_returns_new_instance():
    cache = init(_items(1))
    updated = cache.insert(_items(2))
    assert updated is not cache
    assert len(cache) == 1
    assert cache.insert() is cache


def test_meta_is_merged_shallowly():
    cache = EntityCache().insert([], {"total": 30, "current_page": 1, "last_page": 3})
    cache = cache.insert(None, {"current_page": 2})
    assert cache.total == 30
    assert cache.current_page == 2
    assert cache.last_page == 3
    assert cache.page_info.has_previous
    assert cache.page_info.has_next


def test_meta_accepts_from_alias():
    meta = Meta.model_validate({"from": 11, "to": 20})
    assert meta.from_ == 11
    assert EntityCache(meta=meta).from_ == 11


def test_get_item_handles_missing_and_string_ids():
    cache = init(_items(5))
    assert cache.get_item("5").id == 5
    assert cache.get_item(None) is None
    assert cache.get_item("abc") is None
    assert cache.get_item(6) is None
