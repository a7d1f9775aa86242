"""Product inventory and performance metrics."""

from typing import List, Optional

from crm.models import Product
from crm.storage import Storage
from .schemas import InventoryItem, ProductPerformance


def stock_status(product: Product) -> str:
    if product.stock_available == 0:
        return "out_of_stock"
    if product.stock_available <= product.stock_threshold:
        return "low_stock"
    return "in_stock"


class ProductAnalytics:
    """Inventory and revenue views over the product catalog."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def get_product_inventory(self) -> List[InventoryItem]:
        """Every product with its stock status, lowest stock first."""
        products = sorted(self.storage.list_products(), key=lambda p: (p.stock_available, p.id))
        return [
            InventoryItem(
                id=p.id,
                name=p.name,
                category=p.category,
                stock_available=p.stock_available,
                stock_threshold=p.stock_threshold,
                stock_status=stock_status(p),
            )
            for p in products
        ]

    def get_product_performance(self, product_id: int) -> Optional[ProductPerformance]:
        """
        Revenue and profit of a product.

        Args:
            product_id: Product identifier

        Returns:
            ProductPerformance, or None if the product does not exist
        """
        product = self.storage.get_product(product_id)
        if product is None:
            return None

        revenue = product.price * product.sales_count
        return ProductPerformance(
            product=product,
            revenue=revenue,
            profit=round(revenue * product.profit_margin / 100, 2),
            trend=product.trend,
            stock_status=stock_status(product),
        )

    def get_top_products(self, limit: int = 4) -> List[Product]:
        """Products with the highest price."""
        return sorted(self.storage.list_products(), key=lambda p: p.price, reverse=True)[:limit]
