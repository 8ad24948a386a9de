"""Tests for slug generation."""
import pytest
from catalog_admin.errors import InvalidSlug
from catalog_admin.models import Category
from catalog_admin.services.slugs import build_slug, slugify, unique_slug


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Red Shoe", "red-shoe"),
        ("  Hello,   World!  ", "hello-world"),
        ("Crème Brûlée", "creme-brulee"),
        ("--already-a-slug--", "already-a-slug"),
        ("Size 42 / EU", "size-42-eu"),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_slugify_is_idempotent():
    for text in ["Red Shoe", "Ünïcödé  Text", "a--b__c", "   "]:
        once = slugify(text)
        assert slugify(once) == once


def test_build_slug_rejects_empty_result():
    with pytest.raises(InvalidSlug) as exc:
        build_slug("!!!")
    assert "slug" in exc.value.field_errors


def test_unique_slug_appends_counter(session):
    session.add_all(
        [Category(name="Shoes", slug="shoes"), Category(name="Shoes", slug="shoes-2")]
    )
    session.commit()

    assert unique_slug(session, Category, "Shoes") == "shoes-3"
    assert unique_slug(session, Category, "Bags") == "bags"


def test_unique_slug_excludes_own_row(session):
    category = Category(name="Shoes", slug="shoes")
    session.add(category)
    session.commit()

    assert unique_slug(session, Category, "Shoes", category.id) == "shoes"


def test_unique_slug_falls_back_after_ten_attempts(session):
    session.add(Category(name="Shoes", slug="shoes"))
    session.add_all(
        Category(name="Shoes", slug=f"shoes-{n}") for n in range(2, 11)
    )
    session.commit()

    slug = unique_slug(session, Category, "Shoes")
    assert slug.startswith("shoes-")
    assert slug not in {"shoes"} | {f"shoes-{n}" for n in range(2, 11)}
