#!/usr/bin/env python3
"""Seed sample catalog data for local development."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog_admin import create_app
from catalog_admin.extensions import db
from catalog_admin.models import Attribute, AttributeOption, Category, Product, ProductImage, UserRole
from catalog_admin.services.identity import resolve_identity
from catalog_admin.services.product_service import ProductService

app = create_app()

ADMIN_ID = "admin-1"

CATEGORIES = ["Shoes", "Bags", "Accessories"]

SAMPLE_PRODUCTS = [
    {
        "name": "Canvas Sneaker",
        "price": 45,
        "category": "Shoes",
        "variations": [
            {"size": "40", "color": "White"},
            {"size": "42", "color": "White"},
            {"size": "42", "color": "Black"},
        ],
    },
    {
        "name": "Leather Tote",
        "price": 120,
        "discount_price": 99,
        "category": "Bags",
        "variations": [],
    },
    {
        "name": "Wool Scarf",
        "price": 30,
        "category": "Accessories",
        "variations": [{"color": "Grey"}, {"color": "Navy"}],
    },
]

# Placeholder media (no real upload)
COLORS = ["c0392b", "2c3e50", "27ae60"]


def seed():
    with app.app_context():
        if Product.query.first():
            print("Products already exist, skipping seed.")
            return

        if not db.session.get(UserRole, ADMIN_ID):
            db.session.add(UserRole(user_id=ADMIN_ID, role="admin"))
        categories = {}
        for i, name in enumerate(CATEGORIES):
            category = Category(name=name, slug=name.lower(), sort_order=i)
            db.session.add(category)
            categories[name] = category
        color = Attribute(name="Color", slug="color")
        db.session.add(color)
        db.session.flush()
        for i, value in enumerate(["White", "Black", "Grey", "Navy"]):
            db.session.add(
                AttributeOption(
                    attribute_id=color.id, name=value, slug=value.lower(), sort_order=i
                )
            )
        db.session.commit()

        service = ProductService(db.session, resolve_identity(db.session, ADMIN_ID))
        for i, item in enumerate(SAMPLE_PRODUCTS):
            image = ProductImage(
                url=f"https://placehold.co/600x800/{COLORS[i % len(COLORS)]}/fff?text={i + 1}",
                storage_key="",
                alt_text=item["name"],
                created_by=ADMIN_ID,
            )
            db.session.add(image)
            db.session.commit()

            result = service.create_product(
                {
                    "name": item["name"],
                    "price": item["price"],
                    "discount_price": item.get("discount_price"),
                    "stock_quantity": 10,
                    "category_ids": [categories[item["category"]].id],
                    "image_ids": [image.id],
                    "variations": [
                        {
                            "attributes": attributes,
                            "regular_price": item["price"],
                            "stock_quantity": 5,
                        }
                        for attributes in item["variations"]
                    ],
                }
            )
            print(f"  Created {result['item']['sku']}: {item['name']}")

        print(f"\nSeeded {len(SAMPLE_PRODUCTS)} products.")


if __name__ == "__main__":
    seed()
