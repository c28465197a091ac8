# shop_inventory/services/product_service.py
from typing import Callable, List, Optional

from shop_inventory.models import Product, ProductCategory, PRODUCTS_TABLE
from shop_inventory.core.pricing import shirt_cost_by_quantity
from shop_inventory.exceptions import NotFoundError, ProductError, ValidationError
from shop_inventory.logging_setup import get_logger
from shop_inventory.storage.catalog import CatalogStore
from shop_inventory.utils.date_utils import now_iso
from shop_inventory.utils.records import next_id
from shop_inventory.utils.validation import (
    normalize_category, normalize_optional_size, validate_product
)

logger = get_logger(__name__)

# Fields a caller may change directly; stock only moves through purchases,
# sales and plate printing
UPDATABLE_FIELDS = {'name', 'category', 'price', 'cost', 'size', 'width_mm', 'height_mm', 'area_mm2'}


class ProductService:
    """Service for handling product catalog operations."""

    def __init__(self, store: CatalogStore, clock: Callable[[], str] = now_iso):
        """Initialize the product service.

        Args:
            store: Catalog store
            clock: Returns the current timestamp
        """
        self.store = store
        self.clock = clock

    def get_products(self) -> List[Product]:
        """Get all products sorted by name."""
        return sorted(self.store.load_catalog(), key=lambda p: p.name.casefold())

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get a product by ID.

        Args:
            product_id: Product ID

        Returns:
            Product or None if not found
        """
        return self.store.find(PRODUCTS_TABLE, Product, product_id)

    def add_product(
        self,
        name: str,
        category: str,
        price: float = 0.0,
        stock: int = 0,
        cost: float = 0.0,
        size: Optional[str] = None,
        width_mm: Optional[float] = None,
        height_mm: Optional[float] = None,
        area_mm2: Optional[float] = None
    ) -> int:
        """Add a product to the catalog.

        Returns:
            New product ID

        Raises:
            ProductError: if the product data is invalid
        """
        products, version = self.store.load_catalog_versioned()
        product = Product(
            id=next_id(products),
            name=(name or '').strip(),
            category=normalize_category(category),
            price=float(price),
            stock=int(stock),
            cost=float(cost),
            size=normalize_optional_size(size),
            width_mm=width_mm,
            height_mm=height_mm,
            area_mm2=area_mm2,
            created_at=self.clock()
        )

        errors = validate_product(product)
        if errors:
            raise ProductError(f"Invalid product '{name}'", code='PRODUCT', details=errors)

        products.append(product)
        self.store.save_catalog(products, expected_version=version)
        logger.info(f"Added product {product.id} '{product.name}' ({product.category})")
        return product.id

    def update_product(self, product_id: int, **updates) -> bool:
        """Update editable fields of a product.

        Args:
            product_id: Product ID
            **updates: Field values to change

        Returns:
            True if the product was found and updated

        Raises:
            ValidationError: on unknown fields or invalid values
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update fields: {', '.join(sorted(unknown))}",
                code='FIELDS',
                details={'fields': sorted(unknown)}
            )

        if 'category' in updates:
            updates['category'] = normalize_category(updates['category'])
        if 'size' in updates:
            updates['size'] = normalize_optional_size(updates['size'])

        def mutate(product: Product) -> bool:
            for key, value in updates.items():
                setattr(product, key, value)
            errors = validate_product(product)
            if errors:
                raise ProductError(f"Invalid update for product {product_id}", code='PRODUCT', details=errors)
            return True

        updated = self.store.update_record(PRODUCTS_TABLE, Product, product_id, mutate)
        if updated:
            logger.info(f"Updated product {product_id}: {sorted(updates)}")
        else:
            logger.warning(f"Product {product_id} not found for update")
        return updated

    def quote_unit_price(self, product_id: int, quantity: int = 1) -> float:
        """Unit sale price for a quantity, applying shirt quantity tiers.

        Raises:
            NotFoundError: if the product does not exist
        """
        product = self.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        if product.category == ProductCategory.SHIRTS.value:
            return shirt_cost_by_quantity(product.price, quantity)
        return product.price
