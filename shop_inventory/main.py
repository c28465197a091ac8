import argparse
import sys

from tabulate import tabulate

from shop_inventory.config import config
from shop_inventory.exceptions import ShopInventoryError
from shop_inventory.logging_setup import get_logger
from shop_inventory.storage import open_store
from shop_inventory.services import (
    InventoryService, PlateService, ProductService, ReportingService
)
from shop_inventory.sample_data import initialize_sample_data, reset_database

log = get_logger('cli')


def init_application(db_url=None):
    """Initialize application components.

    Args:
        db_url: Database URL overriding the [STORAGE] setting

    Returns:
        CatalogStore opened on the database
    """
    url = db_url or config.storage_config['url']
    store = open_store(url)

    log.info("Print Shop Inventory initialized")
    log.info(f"Using database: {url}")

    return store


def parse_size_quantities(values):
    """Parse repeated KEY=QTY options into a dict.

    Raises:
        argparse.ArgumentTypeError: on a malformed option
    """
    quantities = {}
    for value in values or []:
        key, sep, qty = value.partition('=')
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected KEY=QTY, got '{value}'")
        try:
            quantities[key] = quantities.get(key, 0) + int(qty)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Quantity for '{key}' must be an integer, got '{qty}'")
    return quantities


def cmd_init(store, args):
    if initialize_sample_data(store):
        print("Sample data loaded")
    else:
        print("Database already contains products")
    return True


def cmd_reset(store, args):
    result = reset_database(store)
    print(f"Database reset: {result['products']} products, {result['fixed_costs']} fixed costs")
    return True


def cmd_products(store, args):
    products = ProductService(store).get_products()
    if args.category:
        products = [p for p in products if p.category == args.category.strip().lower()]

    table_data = [
        [p.id, p.name, p.category, p.size or '', p.stock, f"{p.price:.2f}", f"{p.cost:.2f}"]
        for p in products
    ]
    print(tabulate(table_data, headers=['ID', 'Name', 'Category', 'Size', 'Stock', 'Price', 'Cost']))
    print(f"\nTotal Products: {len(products)}")
    return True


def cmd_plates(store, args):
    service = PlateService(store)
    plates = service.get_plates()

    table_data = []
    for plate in plates:
        sizes = ', '.join(f"{key}={qty}" for key, qty in plate.stickers_quantities.items())
        table_data.append([
            plate.id,
            plate.name,
            f"{plate.cost:.2f}",
            sizes,
            plate.total_quantity,
            'printed' if plate.is_printed else 'pending',
            plate.date_created or '',
            plate.date_printed or ''
        ])
    print(tabulate(table_data, headers=['ID', 'Name', 'Cost', 'Sizes', 'Units', 'Status', 'Created', 'Printed']))

    demand = service.pending_sticker_demand()
    if demand:
        print("\nStickers needed for pending reservations:")
        print(tabulate(sorted(demand.items()), headers=['Size', 'Quantity']))
    return True


def cmd_create_plate(store, args):
    quantities = parse_size_quantities(args.size)
    plate_id = PlateService(store).create_plate(
        args.name,
        stickers_quantities=quantities,
        cost=args.cost
    )
    print(f"Created plate {plate_id}")
    return True


def cmd_preview_plate(store, args):
    preview = PlateService(store).preview_plate(args.plate_id)
    if preview is None:
        log.error(f"Plate {args.plate_id} not found")
        return False

    status = 'printed' if preview.is_printed else 'pending'
    print(f"\nPlate {preview.plate_id} '{preview.plate_name}' ({status})")
    print(f"Cost: {preview.plate_cost:.2f}  Mode: {preview.cost_mode.value}  "
          f"Units: {preview.total_count}  Area: {preview.total_area:.0f} mm²")

    table_data = []
    for size in preview.sizes:
        bound = ', '.join(f"{p['name']} x{p['assigned_quantity']}" for p in size.products) or '(new product)'
        table_data.append([
            size.size_key,
            size.quantity,
            '' if size.unit_area is None else f"{size.unit_area:.0f}",
            f"{size.unit_cost:.4f}",
            f"{size.total_cost:.2f}",
            bound
        ])
    print(tabulate(table_data, headers=['Size', 'Qty', 'Unit Area', 'Unit Cost', 'Total Cost', 'Products']))
    print(f"\nAllocated: {preview.allocated_cost:.2f}")
    return True


def cmd_print_plate(store, args):
    application = PlateService(store).print_plate_report(args.plate_id)
    if application is None:
        log.error(f"Plate {args.plate_id} not found or already printed")
        return False

    table_data = [
        [d.product_id, d.name, d.size_key, d.quantity, f"{d.unit_cost:.4f}",
         d.stock_after, f"{d.cost_before:.2f}", f"{d.cost_after:.2f}"]
        for d in application.deltas
    ]
    print(tabulate(table_data, headers=['ID', 'Product', 'Size', 'Qty', 'Unit Cost', 'Stock', 'Old Cost', 'New Cost']))
    print(f"\nPlate {args.plate_id} printed ({application.cost_mode.value} mode), "
          f"cost assigned: {application.assigned_cost:.2f}")
    return True


def cmd_delete_plate(store, args):
    if not PlateService(store).delete_plate(args.plate_id):
        log.error(f"Plate {args.plate_id} not found or already printed")
        return False
    print(f"Deleted plate {args.plate_id}")
    return True


def cmd_purchase(store, args):
    purchase_id = InventoryService(store).record_purchase(args.product_id, args.quantity, args.unit_cost)
    print(f"Recorded purchase {purchase_id}")
    return True


def cmd_sale(store, args):
    sale_id = InventoryService(store).record_sale(
        args.product_id,
        args.quantity,
        args.unit_price,
        allow_oversell=args.allow_oversell
    )
    print(f"Recorded sale {sale_id}")
    return True


def cmd_stock_report(store, args):
    report = ReportingService(store).stock_report()
    table_data = [
        [row['id'], row['name'], row['category'], row['stock'], f"{row['cost']:.2f}", f"{row['stock_value']:.2f}"]
        for row in report['items']
    ]
    print(tabulate(table_data, headers=['ID', 'Name', 'Category', 'Stock', 'Cost', 'Value']))

    summary = report['summary']
    print(f"\nTotal units: {summary['total_units']}  "
          f"Inventory value: {summary['total_value']:.2f}  "
          f"Out of stock: {summary['out_of_stock']}")
    return True


def cmd_sales_report(store, args):
    report = ReportingService(store).sales_report()
    table_data = [
        [row['product_id'], row['name'], row['total_sold'], f"{row['total_revenue']:.2f}",
         f"{row['avg_price']:.2f}", f"{row['gross_profit']:.2f}"]
        for row in report['items']
    ]
    print(tabulate(table_data, headers=['ID', 'Name', 'Sold', 'Revenue', 'Avg Price', 'Gross Profit']))

    summary = report['summary']
    print(f"\nUnits sold: {summary['total_units']}  Revenue: {summary['total_revenue']:.2f}")
    return True


COMMANDS = {
    'init': cmd_init,
    'reset': cmd_reset,
    'products': cmd_products,
    'plates': cmd_plates,
    'create-plate': cmd_create_plate,
    'preview-plate': cmd_preview_plate,
    'print-plate': cmd_print_plate,
    'delete-plate': cmd_delete_plate,
    'purchase': cmd_purchase,
    'sale': cmd_sale,
    'stock-report': cmd_stock_report,
    'sales-report': cmd_sales_report,
}


def build_parser():
    parser = argparse.ArgumentParser(description='Print Shop Inventory')
    parser.add_argument('--db-url', type=str, help='Database URL (defaults to [STORAGE] url)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    subparsers.add_parser('init', help='Load sample data into an empty database')
    subparsers.add_parser('reset', help='Clear all tables and reload sample data')

    products_parser = subparsers.add_parser('products', help='List products')
    products_parser.add_argument('--category', type=str, help='Only show one category')

    subparsers.add_parser('plates', help='List printing plates')

    create_parser = subparsers.add_parser('create-plate', help='Create a printing plate')
    create_parser.add_argument('--name', type=str, required=True, help='Plate name')
    create_parser.add_argument('--size', action='append', metavar='KEY=QTY',
                               help='Sticker size and quantity (repeatable)')
    create_parser.add_argument('--cost', type=float, help='Plate cost (defaults to [PLATES] default_cost)')

    for name, help_text in (('preview-plate', 'Show what printing a plate would do'),
                            ('print-plate', 'Print a plate and update stock'),
                            ('delete-plate', 'Delete a pending plate')):
        plate_parser = subparsers.add_parser(name, help=help_text)
        plate_parser.add_argument('plate_id', type=int, help='Plate ID')

    purchase_parser = subparsers.add_parser('purchase', help='Record a purchase')
    purchase_parser.add_argument('product_id', type=int, help='Product ID')
    purchase_parser.add_argument('quantity', type=int, help='Units bought')
    purchase_parser.add_argument('unit_cost', type=float, help='Cost per unit')

    sale_parser = subparsers.add_parser('sale', help='Record a sale')
    sale_parser.add_argument('product_id', type=int, help='Product ID')
    sale_parser.add_argument('quantity', type=int, help='Units sold')
    sale_parser.add_argument('unit_price', type=float, help='Price per unit')
    sale_parser.add_argument('--allow-oversell', action='store_true',
                             help='Allow stock to go negative')

    subparsers.add_parser('stock-report', help='Stock levels and inventory value')
    subparsers.add_parser('sales-report', help='Sales totals by product')

    return parser


def main(argv=None):
    """Main application entry point.

    Returns:
        Process exit code: 0 on success, 1 on failure
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        store = init_application(args.db_url)
        success = COMMANDS[args.command](store, args)
    except argparse.ArgumentTypeError as e:
        log.error(str(e))
        return 1
    except ShopInventoryError as e:
        log.error(f"Error running '{args.command}': {str(e)}")
        return 1

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
