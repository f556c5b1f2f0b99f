import logging

log = logging.getLogger(__name__)

SAMPLE_CUSTOMERS = """
    INSERT INTO customers (name, phone, email, visits, last_visit) VALUES
    ('Ahmet Yılmaz', '555-1234', 'ahmet@example.com', 12, '2025-03-15'),
    ('Ayşe Demir', '555-5678', 'ayse@example.com', 8, '2025-03-20'),
    ('Mehmet Kaya', '555-9012', 'mehmet@example.com', 5, '2025-03-10'),
    ('Zeynep Yıldız', '555-3456', 'zeynep@example.com', 15, '2025-03-25')
"""

SAMPLE_SERVICES = """
    INSERT INTO services (name, duration, price, description) VALUES
    ('Haircut', 30, 100, 'Standard haircut and styling'),
    ('Beard Trim', 20, 50, 'Beard shaping and tidy-up'),
    ('Hair & Beard', 45, 140, 'Haircut with beard trim'),
    ('Hair Coloring', 90, 250, 'Full hair coloring'),
    ('Classic Shave', 30, 80, 'Traditional straight razor shave')
"""

SAMPLE_APPOINTMENTS = """
    INSERT INTO appointments (customer_id, service_id, date, time, duration, status) VALUES
    (:customer1, :service1, '2025-03-28', '10:00', 30, 'confirmed'),
    (:customer2, :service3, '2025-03-28', '11:30', 45, 'confirmed'),
    (:customer3, :service2, '2025-03-29', '14:00', 20, 'confirmed'),
    (:customer4, :service4, '2025-03-30', '15:30', 90, 'pending')
"""

SAMPLE_PRODUCTS = """
    INSERT INTO products (name, category, price, stock, description) VALUES
    ('Styling Wax', 'Styling', 120, 15, 'Professional hair wax with strong hold.'),
    ('Beard Oil', 'Beard Care', 85, 10, 'Natural oil that softens and nourishes the beard.'),
    ('Men''s Shampoo', 'Shampoo', 75, 20, 'Daily shampoo for men.'),
    ('Conditioner', 'Conditioner', 65, 12, 'Softening hair conditioner.'),
    ('Hair Spray', 'Styling', 95, 8, 'Long-lasting, quick-drying hair spray.')
"""


def count_rows(store, table: str) -> int:
    rows = store.query(f"SELECT COUNT(*) AS count FROM {table}")
    return int(rows[0]["count"]) if rows else 0


def _pick(ids, position):
    """Id at ``position``, or the first id when there are fewer rows."""
    return ids[position] if len(ids) > position else ids[0]


def _seed_appointments(store):
    customers = [row["id"] for row in store.query("SELECT id FROM customers ORDER BY id LIMIT 4")]
    services = [row["id"] for row in store.query("SELECT id FROM services ORDER BY id LIMIT 5")]
    if not customers or not services:
        log.warning("Not enough customers or services to create sample appointments")
        return

    params = {}
    for position in range(4):
        params[f"customer{position + 1}"] = _pick(customers, position)
        params[f"service{position + 1}"] = _pick(services, position)
    store.query(SAMPLE_APPOINTMENTS, params)
    log.info("Sample appointments added")


def seed_if_empty(store) -> bool:
    """Insert the sample data into every table that has no rows yet."""
    if not store.supports_schema:
        log.info("Mock store in use, fixture data already loaded")
        return True

    try:
        for table, statement in (
            ("customers", SAMPLE_CUSTOMERS),
            ("services", SAMPLE_SERVICES),
            ("appointments", None),
            ("products", SAMPLE_PRODUCTS),
        ):
            count = count_rows(store, table)
            log.info(f"Current {table} count: {count}")
            if count:
                continue
            if statement is None:
                _seed_appointments(store)
            else:
                store.query(statement)
                log.info(f"Sample {table} added")
    except Exception as e:
        log.error(f"Error seeding initial data: {e}")
        return False

    log.info("Initial data seeded")
    return True
