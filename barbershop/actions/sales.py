import logging
from collections import defaultdict

from .appointments import PAYMENT_METHODS, UNKNOWN_CUSTOMER
from .common import failure, first_or_none, iso_date, money, not_found, plain, today_iso

log = logging.getLogger(__name__)

MISSING_COLUMN_MARKERS = ("does not exist", "no column named", "unknown column")


class CheckoutError(Exception):
    """A sale that must not be stored; raising it rolls the transaction back."""


def _is_missing_column(error: Exception) -> bool:
    message = str(error).lower()
    return "column" in message and any(marker in message for marker in MISSING_COLUMN_MARKERS)


def _sale_item(row):
    record = plain(row)
    record["price"] = money(record.get("price"))
    record["quantity"] = int(record.get("quantity") or 1)
    return record


def _sale(row, items):
    record = plain(row)
    record["customer_name"] = record.get("customer_name") or UNKNOWN_CUSTOMER
    record["date"] = iso_date(record.get("date"))
    record["total"] = money(record.get("total"))
    record["items"] = [_sale_item(item) for item in items]
    return record


SELECT_SALES = """
    SELECT
      s.*,
      c.name AS customer_name
    FROM sales s
    LEFT JOIN customers c ON s.customer_id = c.id
"""


def get_sales(store):
    """All sales, newest first, each with its line items."""
    try:
        sales = store.query(SELECT_SALES + " ORDER BY s.date DESC, s.id DESC")
        items_by_sale = defaultdict(list)
        for item in store.query("SELECT * FROM sale_items ORDER BY id"):
            items_by_sale[item["sale_id"]].append(item)
    except Exception as e:
        log.error(f"get_sales: error fetching sales: {e}")
        return []

    log.info(f"get_sales: retrieved {len(sales)} sales")
    return [_sale(sale, items_by_sale[sale["id"]]) for sale in sales]


def get_sale_by_id(store, sale_id):
    try:
        sale = first_or_none(store.query(SELECT_SALES + " WHERE s.id = :id", {"id": sale_id}))
        if sale is None:
            return None
        items = store.query(
            "SELECT * FROM sale_items WHERE sale_id = :id ORDER BY id", {"id": sale_id}
        )
    except Exception as e:
        log.error(f"get_sale_by_id: error fetching sale {sale_id}: {e}")
        return None
    return _sale(sale, items)


def _insert_sale_item(tx, sale_id, product, price, quantity):
    """
    Insert one product line. Databases still on the legacy sale_items
    layout (sale_id, service_id, price) get the line total in ``price``.
    """
    try:
        with tx.savepoint():
            rows = tx.query(
                """
                INSERT INTO sale_items (sale_id, item_id, item_type, name, price, quantity)
                VALUES (:sale_id, :item_id, 'product', :name, :price, :quantity)
                RETURNING *
                """,
                {
                    "sale_id": sale_id,
                    "item_id": product["id"],
                    "name": product["name"],
                    "price": price,
                    "quantity": quantity,
                },
            )
    except Exception as e:
        if not _is_missing_column(e):
            raise CheckoutError(f"Error creating sale item: {e}") from e
        log.warning(f"sale_items has the legacy column layout, retrying insert: {e}")
        try:
            with tx.savepoint():
                rows = tx.query(
                    """
                    INSERT INTO sale_items (sale_id, service_id, price)
                    VALUES (:sale_id, :item_id, :price)
                    RETURNING *
                    """,
                    {"sale_id": sale_id, "item_id": product["id"], "price": price * quantity},
                )
        except Exception as legacy_error:
            log.error(f"Legacy sale item insert also failed: {legacy_error}")
            raise CheckoutError(
                "Error creating sale item: database schema mismatch"
            ) from legacy_error

    return rows[0]


def _validate_items(tx, items):
    requested = defaultdict(int)
    validated = []
    for item in items:
        product_id = item.get("product_id")
        quantity = int(item.get("quantity") or 0)
        if quantity <= 0:
            raise CheckoutError(f"Invalid quantity for product with ID {product_id}.")

        product = first_or_none(
            tx.query("SELECT * FROM products WHERE id = :id", {"id": product_id})
        )
        if product is None:
            raise CheckoutError(f"Product with ID {product_id} not found.")

        stock = int(product.get("stock") or 0)
        requested[product["id"]] += quantity
        if requested[product["id"]] > stock:
            raise CheckoutError(f"Not enough stock for {product['name']}. Available: {stock}")

        validated.append((product, money(product.get("price")), quantity))
    return validated


def create_product_sale(store, customer_id, items, payment_method, today=None):
    """
    Sell products to a customer in a single transaction.

    ``items`` is a list of ``{"product_id": ..., "quantity": ...}``. Stock is
    decremented and the customer's visit recorded; any failure leaves
    products, customers and sales untouched.
    """
    if payment_method not in PAYMENT_METHODS:
        return failure(f"Unsupported payment method: {payment_method}")
    if not items:
        return failure("A sale needs at least one item.")

    sale_date = today_iso(today)
    try:
        with store.transaction() as tx:
            customer = first_or_none(
                tx.query("SELECT * FROM customers WHERE id = :id", {"id": customer_id})
            )
            if customer is None:
                raise CheckoutError("Customer not found.")

            validated = _validate_items(tx, items)
            total = round(sum(price * quantity for _, price, quantity in validated), 2)

            sale = tx.query(
                """
                INSERT INTO sales (customer_id, total, payment_method, date, type)
                VALUES (:customer_id, :total, :method, :date, 'product')
                RETURNING *
                """,
                {
                    "customer_id": customer_id,
                    "total": total,
                    "method": payment_method,
                    "date": sale_date,
                },
            )[0]

            sale_items = []
            for product, price, quantity in validated:
                sale_items.append(_insert_sale_item(tx, sale["id"], product, price, quantity))
                tx.query(
                    "UPDATE products SET stock = stock - :quantity WHERE id = :id",
                    {"quantity": quantity, "id": product["id"]},
                )

            tx.query(
                "UPDATE customers SET last_visit = :date, visits = visits + 1 WHERE id = :id",
                {"date": sale_date, "id": customer_id},
            )
    except CheckoutError as e:
        log.warning(f"create_product_sale: sale rolled back: {e}")
        return failure(str(e))
    except Exception as e:
        log.error(f"create_product_sale: error creating product sale: {e}")
        return failure("An error occurred while creating the sale.")

    log.info(f"create_product_sale: sale created with ID {sale['id']}")
    sale["customer_name"] = customer["name"]
    return {
        "success": True,
        "message": "Sale created successfully",
        "sale": _sale(sale, sale_items),
    }


def _exists(store, sale_id) -> bool:
    return bool(store.query("SELECT id FROM sales WHERE id = :id", {"id": sale_id}))


def update_sale(store, sale_id, changes: dict):
    """Only the payment method of a recorded sale can change."""
    payment_method = changes.get("payment_method")
    if payment_method not in PAYMENT_METHODS:
        return failure(f"Unsupported payment method: {payment_method}")

    try:
        if not _exists(store, sale_id):
            return not_found("Sale", sale_id)
        store.query(
            "UPDATE sales SET payment_method = :method WHERE id = :id",
            {"method": payment_method, "id": sale_id},
        )
    except Exception as e:
        log.error(f"update_sale: error updating sale {sale_id}: {e}")
        return failure("An error occurred while updating the sale.")

    return {"success": True, "sale": get_sale_by_id(store, sale_id)}


def delete_sale(store, sale_id):
    """Void a sale. Its items go with it; product stock is not restored."""
    try:
        if not _exists(store, sale_id):
            return not_found("Sale", sale_id)
        store.query("DELETE FROM sales WHERE id = :id", {"id": sale_id})
    except Exception as e:
        log.error(f"delete_sale: error deleting sale {sale_id}: {e}")
        return failure("An error occurred while deleting the sale.")

    return {"success": True, "message": "Sale deleted successfully"}
