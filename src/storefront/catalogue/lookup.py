"""Product lookup by id, slug or variant SKU, in that order."""

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.errors import NotFound
from storefront.shared.identifiers import Lookup, Resolver


def product_resolver() -> Resolver:
    repo = current_domain.repository_for(Product)
    return Resolver(
        Lookup("id", repo.find),
        Lookup("slug", repo.find_by_slug),
        Lookup("sku", repo.find_by_sku),
    )


def find_product(identifier):
    return product_resolver().resolve(identifier)


def get_product(identifier):
    product = find_product(identifier)
    if product is None:
        raise NotFound(f"Product {identifier} not found", field="product_id")
    return product


def get_variant(product, sku):
    variant = product.variant_for(sku)
    if variant is None:
        raise NotFound(f"Variant {sku} not found on product {product.title}", field="variant_sku")
    return variant
