from collections import defaultdict

from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product import Product
from storefront.domain import storefront

_SCAN_PAGE_SIZE = 100


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id):
        """``get`` without the exception: None when the id is unknown."""
        try:
            return self.get(product_id)
        except ObjectNotFoundError:
            return None

    def find_by_slug(self, slug):
        if not slug:
            return None
        products = self._dao.query.filter(slug=str(slug).strip().lower()).all().items
        return products[0] if products else None

    def find_by_sku(self, sku):
        for product in self._scan():
            if product.variant_for(sku) is not None:
                return product
        return None

    def _scan(self):
        offset = 0
        while True:
            page = self._dao.query.offset(offset).limit(_SCAN_PAGE_SIZE).all().items
            yield from page
            if len(page) < _SCAN_PAGE_SIZE:
                return
            offset += _SCAN_PAGE_SIZE

    def adjust_stock(self, adjustments, track_sales=True):
        """Apply ``(product_id, sku, delta)`` adjustments all-or-nothing.

        Every adjustment is checked against current stock before anything is
        saved, and all variants of one product change in a single load/save
        so sibling adjustments never overwrite each other.
        """
        grouped = defaultdict(list)
        for product_id, sku, delta in adjustments:
            grouped[str(product_id)].append((sku, delta))

        products = []
        for product_id, changes in grouped.items():
            product = self.get(product_id)
            for sku, delta in changes:
                product.adjust_stock(sku, delta, track_sales=track_sales)
            products.append(product)

        for product in products:
            self.add(product)
        return products
