"""Load products from a CSV file into the local database.

Columns: name, price, seller_id, stock_qty, sizes
  - stock_qty is ignored for sized products; blank means 0 otherwise
  - sizes is "S:2|M:0|L:5" (order is kept for display)

Usage: python import_catalog.py products.csv
"""
import sys

import pandas as pd
from app import create_app
from app.extensions import db
from app.model import Product, ProductSize, User
from app.utils.money import round_money


def parse_sizes(value):
    if pd.isna(value) or not str(value).strip():
        return []
    out = []
    for pos, chunk in enumerate(str(value).split("|")):
        size, _, stock = chunk.partition(":")
        out.append(ProductSize(size=size.strip(), stock=int(stock or 0), position=pos))
    return out


def import_csv(csv_path):
    """Insert every row of `csv_path` as a product. Needs an app context."""
    df = pd.read_csv(csv_path)
    df.columns = df.columns.str.strip().str.lower()

    missing = {"name", "price", "seller_id"} - set(df.columns)
    if missing:
        raise SystemExit(f"missing columns: {', '.join(sorted(missing))}")

    count = 0
    for _, row in df.iterrows():
        seller_id = int(row["seller_id"])
        if not db.session.get(User, seller_id):
            raise SystemExit(f"seller {seller_id} does not exist (row {count + 1})")

        sizes = parse_sizes(row.get("sizes"))
        stock = row.get("stock_qty")
        if sizes:
            stock = None
        else:
            stock = 0 if stock is None or pd.isna(stock) else int(stock)
        product = Product(
            name=str(row["name"]).strip(),
            price=round_money(row["price"]),
            seller_id=seller_id,
            stock_qty=stock,
            sizes=sizes,
        )
        db.session.add(product)
        count += 1

    db.session.commit()
    return count


def main(csv_path):
    app = create_app()
    with app.app_context():
        count = import_csv(csv_path)
    print(f"{count} products imported from {csv_path}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        raise SystemExit("usage: python import_catalog.py <products.csv>")
    main(sys.argv[1])
