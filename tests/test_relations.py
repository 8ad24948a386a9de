"""Tests for link table maintenance."""
import pytest
from catalog_admin.errors import DependencyError
from catalog_admin.models.links import CATEGORY_LINKS, PENDING_CATEGORY_LINKS, TAG_LINKS
from catalog_admin.services import relations


def test_dedupe_ids_keeps_first_seen_order():
    assert relations.dedupe_ids([3, None, 1, 3, "", 2, 1]) == [3, 1, 2]
    assert relations.dedupe_ids(None) == []


def test_replace_links_is_idempotent(session, catalog, make_product):
    product = make_product()
    ids = [catalog.shoes.id, catalog.bags.id, catalog.shoes.id]

    relations.replace_links(session, CATEGORY_LINKS, product.id, ids)
    relations.replace_links(session, CATEGORY_LINKS, product.id, ids)
    session.commit()

    assert sorted(relations.link_ids(session, CATEGORY_LINKS, product.id)) == sorted(
        [catalog.shoes.id, catalog.bags.id]
    )


def test_replace_links_replaces_whole_set(session, catalog, make_product):
    product = make_product()
    relations.replace_links(session, CATEGORY_LINKS, product.id, [catalog.shoes.id])
    relations.replace_links(session, CATEGORY_LINKS, product.id, [catalog.bags.id])
    session.commit()

    assert relations.link_ids(session, CATEGORY_LINKS, product.id) == [catalog.bags.id]


def test_replace_links_with_empty_list_clears(session, catalog, make_product):
    product = make_product()
    relations.replace_links(session, TAG_LINKS, product.id, [catalog.sale.id])
    relations.replace_links(session, TAG_LINKS, product.id, [])
    session.commit()

    assert relations.link_ids(session, TAG_LINKS, product.id) == []


def test_add_link_ignores_existing(session, catalog, make_product):
    product = make_product()
    relations.add_link(session, CATEGORY_LINKS, product.id, catalog.shoes.id)
    relations.add_link(session, CATEGORY_LINKS, product.id, catalog.shoes.id)
    session.commit()

    assert relations.link_ids(session, CATEGORY_LINKS, product.id) == [catalog.shoes.id]


def test_clear_links_only_touches_one_product(session, catalog, make_product):
    first = make_product("First")
    second = make_product("Second")
    for product in (first, second):
        relations.replace_links(session, CATEGORY_LINKS, product.id, [catalog.shoes.id])

    relations.clear_links(session, first.id, [CATEGORY_LINKS, PENDING_CATEGORY_LINKS])
    session.commit()

    assert relations.link_ids(session, CATEGORY_LINKS, first.id) == []
    assert relations.link_ids(session, CATEGORY_LINKS, second.id) == [catalog.shoes.id]


def test_replace_links_translates_store_failures(session, monkeypatch, make_product):
    from sqlalchemy.exc import OperationalError

    product = make_product()

    def boom(*args, **kwargs):
        raise OperationalError("DELETE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "execute", boom)
    with pytest.raises(DependencyError):
        relations.replace_links(session, TAG_LINKS, product.id, [1])
