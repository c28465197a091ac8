# shop_inventory/services/reporting_service.py
from typing import Any, Dict, List

import pandas as pd

from shop_inventory.models import Sale, SALES_TABLE
from shop_inventory.logging_setup import get_logger
from shop_inventory.storage.catalog import CatalogStore

logger = get_logger(__name__)

SALES_COLUMNS = ['product_id', 'name', 'category', 'total_sold', 'total_revenue',
                 'total_cost', 'avg_price', 'gross_profit']
STOCK_COLUMNS = ['id', 'name', 'category', 'size', 'stock', 'cost', 'price', 'stock_value']


def _records(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a frame to plain Python rows, NaN becoming None."""
    frame = frame.astype(object).where(pd.notnull(frame), None)
    rows = frame.to_dict(orient='records')
    return [
        {key: value.item() if hasattr(value, 'item') else value for key, value in row.items()}
        for row in rows
    ]


class ReportingService:
    """Service for generating sales and stock reports."""

    def __init__(self, store: CatalogStore):
        """Initialize the reporting service.

        Args:
            store: Catalog store
        """
        self.store = store

    def _products_frame(self) -> pd.DataFrame:
        products = [p.to_dict() for p in self.store.load_catalog()]
        if not products:
            return pd.DataFrame(columns=['id', 'name', 'category', 'size', 'stock', 'cost', 'price'])
        return pd.DataFrame(products)

    def sales_report(self) -> Dict[str, Any]:
        """Generate per-product sales totals.

        Sales whose product no longer exists are left out.

        Returns:
            Dictionary with ``items`` (sorted by revenue, highest first) and
            a ``summary``
        """
        sales = [s.to_dict() for s in self.store.load_records(SALES_TABLE, Sale)]
        products = self._products_frame()

        if not sales or products.empty:
            return {
                'items': [],
                'summary': {'total_units': 0, 'total_revenue': 0.0, 'gross_profit': 0.0}
            }

        frame = pd.DataFrame(sales)
        frame['line_cost'] = frame['quantity'] * frame['unit_cost']

        grouped = frame.groupby('product_id', as_index=False).agg(
            total_sold=('quantity', 'sum'),
            total_revenue=('total', 'sum'),
            total_cost=('line_cost', 'sum'),
            # Plain mean of the per-sale prices, not weighted by quantity
            avg_price=('unit_price', 'mean')
        )

        report = grouped.merge(
            products[['id', 'name', 'category']],
            left_on='product_id', right_on='id', how='inner'
        ).drop(columns=['id'])

        skipped = len(grouped) - len(report)
        if skipped:
            logger.warning(f"Sales report skipped sales for {skipped} unknown product(s)")

        report['gross_profit'] = report['total_revenue'] - report['total_cost']
        report = report.sort_values('total_revenue', ascending=False, kind='stable')[SALES_COLUMNS]

        return {
            'items': _records(report),
            'summary': {
                'total_units': int(report['total_sold'].sum()),
                'total_revenue': float(report['total_revenue'].sum()),
                'gross_profit': float(report['gross_profit'].sum())
            }
        }

    def stock_report(self) -> Dict[str, Any]:
        """Generate the stock report, lowest stock first.

        Returns:
            Dictionary with ``items`` and a ``summary``
        """
        products = self._products_frame()
        if products.empty:
            return {
                'items': [],
                'summary': {'total_products': 0, 'total_units': 0, 'total_value': 0.0, 'out_of_stock': 0}
            }

        products['stock_value'] = products['stock'] * products['cost']
        report = products.sort_values('stock', kind='stable')[STOCK_COLUMNS]

        return {
            'items': _records(report),
            'summary': {
                'total_products': len(report),
                'total_units': int(report['stock'].sum()),
                'total_value': float(report['stock_value'].sum()),
                'out_of_stock': int((report['stock'] <= 0).sum())
            }
        }

    def inventory_value(self) -> float:
        """Total value of stock on hand at average cost."""
        return self.stock_report()['summary']['total_value']
