#!/usr/bin/env python3
"""
Database Seeding Script - POS Admin
Seeds a demo superadmin, outlet, categories and products for local testing.
"""

import csv
import os
from decimal import Decimal
from pathlib import Path

DEMO_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@pos-admin.local")
DEMO_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")


def read_csv(filepath: str) -> list[dict]:
    """Read a CSV file; a missing file yields no rows."""
    if not os.path.exists(filepath):
        return []
    with open(filepath, "r", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def main():
    """Main function."""
    print("=" * 60)
    print("Database Seeding - POS Admin")
    print("=" * 60)

    from pos_admin.infrastructure.database import init_db

    init_db()

    from pos_admin.core.security import UserRole, hash_password
    from pos_admin.infrastructure.database import SessionLocal
    from pos_admin.infrastructure.database.models import (
        AuthUser,
        Outlet,
        Product,
        ProductCategory,
        Profile,
    )

    db = SessionLocal()

    try:
        # Superadmin
        user = db.query(AuthUser).filter(AuthUser.email == DEMO_EMAIL).first()
        if not user:
            password_hash, salt = hash_password(DEMO_PASSWORD)
            user = AuthUser(email=DEMO_EMAIL, password_hash=password_hash, password_salt=salt.hex())
            db.add(user)
            db.flush()
            db.add(Profile(user_id=user.id, full_name="Demo Admin", role=UserRole.SUPERADMIN.value))
            db.commit()
            print(f"✓ Created superadmin: {DEMO_EMAIL}")
        else:
            print(f"✓ Superadmin already exists: {DEMO_EMAIL}")

        # Outlet
        outlet = db.query(Outlet).filter(Outlet.owner_id == user.id).first()
        if not outlet:
            outlet = Outlet(
                name="Kopi Kita Sudirman",
                address="Jl. Jend. Sudirman No. 1, Jakarta",
                phone="021 555 0101",
                owner_id=user.id,
            )
            db.add(outlet)
            db.flush()
            print(f"✓ Created outlet: {outlet.name}")
        else:
            print(f"✓ Outlet already exists: {outlet.name}")

        profile = db.query(Profile).filter(Profile.user_id == user.id).first()
        if profile.outlet_id is None:
            profile.outlet_id = outlet.id
        db.commit()

        # Categories and products
        products_file = Path(__file__).parent / "seed_data" / "products.csv"
        products_data = read_csv(str(products_file))
        print(f"\n📦 Seeding {len(products_data)} products...")

        categories = {
            c.name: c
            for c in db.query(ProductCategory).filter(ProductCategory.outlet_id == outlet.id).all()
        }
        created = 0
        for row in products_data:
            category_name = (row.get("category") or "").strip()
            category = None
            if category_name:
                category = categories.get(category_name)
                if category is None:
                    category = ProductCategory(name=category_name, outlet_id=outlet.id)
                    db.add(category)
                    db.flush()
                    categories[category_name] = category

            exists = (
                db.query(Product)
                .filter(Product.outlet_id == outlet.id, Product.sku == row["sku"])
                .first()
            )
            if not exists:
                db.add(Product(
                    name=row["name"],
                    sku=row["sku"],
                    price=Decimal(row.get("price") or "0"),
                    cost_price=Decimal(row.get("cost_price") or "0"),
                    stock_quantity=int(row.get("stock_quantity") or 0),
                    min_stock=int(row.get("min_stock") or 5),
                    category_id=category.id if category else None,
                    outlet_id=outlet.id,
                ))
                created += 1
        db.commit()
        print(f"✓ Seeded {created} products in {len(categories)} categories")

        print("\n" + "=" * 60)
        print("Seeding completed successfully!")
        print(f"Sign in as {DEMO_EMAIL} / {DEMO_PASSWORD}")
        print("=" * 60)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
