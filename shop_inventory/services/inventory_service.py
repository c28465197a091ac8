# shop_inventory/services/inventory_service.py
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from shop_inventory.models import Product, Purchase, Sale, PRODUCTS_TABLE, PURCHASES_TABLE, SALES_TABLE
from shop_inventory.core.cost_ledger import apply_addition
from shop_inventory.exceptions import NotFoundError, ValidationError
from shop_inventory.logging_setup import get_logger
from shop_inventory.storage.catalog import CatalogStore
from shop_inventory.utils.date_utils import now_iso, newest_first_key
from shop_inventory.utils.records import next_id

logger = get_logger(__name__)


class PendingSale(NamedTuple):
    """A sale that has been built but not saved yet."""
    sale: Sale
    product: Product
    writes: Dict[str, Tuple[List[Any], int]]


class InventoryService:
    """Service for stock movements: purchases and sales."""

    def __init__(self, store: CatalogStore, clock: Callable[[], str] = now_iso):
        """Initialize the inventory service.

        Args:
            store: Catalog store
            clock: Returns the current timestamp
        """
        self.store = store
        self.clock = clock

    def _load_product(self, product_id: int):
        products, version = self.store.load_catalog_versioned()
        for product in products:
            if product.id == product_id:
                return products, version, product
        raise NotFoundError(f"Product {product_id} not found", details={'product_id': product_id})

    def get_purchases(self) -> List[Purchase]:
        """Get all purchases, newest first."""
        purchases = self.store.load_records(PURCHASES_TABLE, Purchase)
        return sorted(purchases, key=lambda p: newest_first_key(p.date), reverse=True)

    def get_sales(self) -> List[Sale]:
        """Get all sales, newest first."""
        sales = self.store.load_records(SALES_TABLE, Sale)
        return sorted(sales, key=lambda s: newest_first_key(s.date), reverse=True)

    def record_purchase(self, product_id: int, quantity: int, unit_cost: float) -> int:
        """Record a purchase and fold it into the product's average cost.

        Args:
            product_id: Product ID
            quantity: Units bought
            unit_cost: Cost per unit

        Returns:
            New purchase ID

        Raises:
            ValidationError: if quantity is not positive or cost is negative
            NotFoundError: if the product does not exist
        """
        if quantity <= 0:
            raise ValidationError("Purchase quantity must be positive", code='QUANTITY')
        if unit_cost < 0:
            raise ValidationError("Purchase unit cost cannot be negative", code='COST')

        products, version, product = self._load_product(product_id)
        previous_cost = product.cost
        apply_addition(product, quantity, unit_cost)

        purchases, purchases_version = self.store.load_records_versioned(PURCHASES_TABLE, Purchase)
        purchase = Purchase(
            id=next_id(purchases),
            product_id=product_id,
            quantity=quantity,
            unit_cost=unit_cost,
            total=quantity * unit_cost,
            date=self.clock()
        )
        purchases.append(purchase)

        self.store.save_tables({
            PRODUCTS_TABLE: (products, version),
            PURCHASES_TABLE: (purchases, purchases_version)
        })

        logger.info(
            f"Purchase {purchase.id}: {quantity} x '{product.name}' at {unit_cost:.2f} "
            f"(cost {previous_cost:.2f} -> {product.cost:.2f}, stock {product.stock})"
        )
        return purchase.id

    def record_sale(
        self,
        product_id: int,
        quantity: int,
        unit_price: float,
        unit_cost: Optional[float] = None,
        reservation_id: Optional[int] = None,
        allow_oversell: bool = False
    ) -> int:
        """Record a sale and take the units out of stock.

        Args:
            product_id: Product ID
            quantity: Units sold
            unit_price: Sale price per unit
            unit_cost: Cost per unit at the time of sale (defaults to the
                product's current average cost)
            reservation_id: Reservation being fulfilled, if any
            allow_oversell: Let stock go negative instead of rejecting

        Returns:
            New sale ID

        Raises:
            ValidationError: on non-positive quantity, negative price, or
                insufficient stock
            NotFoundError: if the product does not exist
        """
        pending = self.prepare_sale(product_id, quantity, unit_price, unit_cost, reservation_id, allow_oversell)
        self.store.save_tables(pending.writes)
        self.log_sale(pending)
        return pending.sale.id

    def prepare_sale(
        self,
        product_id: int,
        quantity: int,
        unit_price: float,
        unit_cost: Optional[float] = None,
        reservation_id: Optional[int] = None,
        allow_oversell: bool = False
    ) -> PendingSale:
        """Build a sale and the table writes that record it, without saving.

        Callers that must record the sale together with another table add
        their own entry to ``writes`` and save them all at once.
        """
        if quantity <= 0:
            raise ValidationError("Sale quantity must be positive", code='QUANTITY')
        if unit_price < 0:
            raise ValidationError("Sale unit price cannot be negative", code='PRICE')

        products, version, product = self._load_product(product_id)
        if product.stock < quantity and not allow_oversell:
            raise ValidationError(
                f"Insufficient stock for '{product.name}'. Available: {product.stock}",
                code='STOCK',
                details={'available': product.stock, 'requested': quantity}
            )

        sale_cost = product.cost if unit_cost is None else unit_cost
        apply_addition(product, -quantity, sale_cost)

        sales, sales_version = self.store.load_records_versioned(SALES_TABLE, Sale)
        sale = Sale(
            id=next_id(sales),
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            unit_cost=sale_cost,
            total=quantity * unit_price,
            reservation_id=reservation_id,
            date=self.clock()
        )
        sales.append(sale)

        return PendingSale(sale, product, {
            PRODUCTS_TABLE: (products, version),
            SALES_TABLE: (sales, sales_version)
        })

    def log_sale(self, pending: PendingSale):
        """Log a sale once its writes are saved."""
        sale, product = pending.sale, pending.product
        if product.stock < 0:
            logger.warning(f"Product {product.id} '{product.name}' oversold, stock now {product.stock}")
        logger.info(f"Sale {sale.id}: {sale.quantity} x '{product.name}' at {sale.unit_price:.2f}")

    def quick_sale(self, product_id: int) -> Optional[int]:
        """Sell one unit at list price.

        Returns:
            Sale ID, or None if the product has no stock
        """
        _, _, product = self._load_product(product_id)
        if product.stock <= 0:
            logger.warning(f"Quick sale rejected: product {product_id} has no stock")
            return None
        return self.record_sale(product_id, 1, product.price, unit_cost=product.cost)

    def quick_purchase(self, product_id: int) -> int:
        """Buy one unit at the product's current cost."""
        _, _, product = self._load_product(product_id)
        return self.record_purchase(product_id, 1, product.cost)

