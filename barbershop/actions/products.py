import logging

from .common import ActionError, failure, money, not_found, plain

log = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"


def _product(row):
    record = plain(row)
    record["price"] = money(record.get("price"))
    record["stock"] = int(record.get("stock") or 0)
    return record


def get_products(store):
    try:
        rows = store.query("SELECT * FROM products ORDER BY name")
    except Exception as e:
        log.error(f"get_products: error fetching products: {e}")
        return []
    log.info(f"get_products: retrieved {len(rows)} products")
    return [_product(row) for row in rows]


def get_product_by_id(store, product_id):
    try:
        rows = store.query("SELECT * FROM products WHERE id = :id", {"id": product_id})
    except Exception as e:
        log.error(f"get_product_by_id: error fetching product {product_id}: {e}")
        return None
    return _product(rows[0]) if rows else None


def create_product(store, product: dict):
    try:
        rows = store.query(
            """
            INSERT INTO products (name, category, price, stock, description)
            VALUES (:name, :category, :price, :stock, :description)
            RETURNING *
            """,
            {
                "name": product.get("name"),
                "category": product.get("category") or DEFAULT_CATEGORY,
                "price": float(product.get("price") or 0),
                "stock": int(product.get("stock") or 0),
                "description": product.get("description") or "",
            },
        )
    except Exception as e:
        log.error(f"create_product: error creating product: {e}")
        raise ActionError("An error occurred while creating the product.") from e

    if not rows:
        raise ActionError("The product was not stored.")
    created = _product(rows[0])
    log.info(f"create_product: product created with ID {created['id']}")
    return created


def _exists(store, product_id) -> bool:
    return bool(store.query("SELECT id FROM products WHERE id = :id", {"id": product_id}))


def update_product(store, product_id, changes: dict):
    try:
        if not _exists(store, product_id):
            return not_found("Product", product_id)

        price = changes.get("price")
        stock = changes.get("stock")
        rows = store.query(
            """
            UPDATE products SET
              name = COALESCE(:name, name),
              category = COALESCE(:category, category),
              price = COALESCE(:price, price),
              stock = COALESCE(:stock, stock),
              description = COALESCE(:description, description)
            WHERE id = :id
            RETURNING *
            """,
            {
                "name": changes.get("name") or None,
                "category": changes.get("category") or None,
                "price": float(price) if price is not None else None,
                "stock": int(stock) if stock is not None else None,
                "description": changes.get("description"),
                "id": product_id,
            },
        )
    except Exception as e:
        log.error(f"update_product: error updating product {product_id}: {e}")
        return failure("An error occurred while updating the product.")

    return {"success": True, "product": _product(rows[0])}


def delete_product(store, product_id):
    try:
        if not _exists(store, product_id):
            return not_found("Product", product_id)
        store.query("DELETE FROM products WHERE id = :id", {"id": product_id})
    except Exception as e:
        log.error(f"delete_product: error deleting product {product_id}: {e}")
        return failure("An error occurred while deleting the product.")

    return {"success": True, "message": "Product deleted successfully"}
