"""Live catalogue lookups for cart lines.

A line remembers its product id and slug; the product is looked up by id
first and by slug when the id no longer resolves.
"""

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product


def product_for_line(item):
    repo = current_domain.repository_for(Product)
    product = repo.find(item.product_id) if item.product_id else None
    if product is None and item.product_slug:
        product = repo.find_by_slug(item.product_slug)
    if product is None and item.variant_sku:
        product = repo.find_by_sku(item.variant_sku)
    return product
