"""Client-side search over lists already loaded from the API"""


def _matches(value, query):
    return bool(value) and query in str(value).lower()


def filter_products(products, query, active_only=False):
    """
    Case-insensitive substring match on name, SKU or barcode.

    A blank query returns every product (active ones only with active_only).
    """
    if active_only:
        products = [p for p in products if p.get('active', True)]
    query = (query or '').strip().lower()
    if not query:
        return list(products)
    return [
        p for p in products
        if _matches(p.get('name'), query)
        or _matches(p.get('sku'), query)
        or _matches(p.get('barcode'), query)
    ]


def filter_by_name(items, query, active_only=False):
    """Vendors, customers and stores are searched by name only"""
    if active_only:
        items = [i for i in items if i.get('active', True)]
    query = (query or '').strip().lower()
    if not query:
        return list(items)
    return [i for i in items if _matches(i.get('name'), query)]


def product_index(products):
    """{id: product}, as InvoiceFormSerializer expects in its context"""
    return {p['id']: p for p in products if p.get('id') is not None}
