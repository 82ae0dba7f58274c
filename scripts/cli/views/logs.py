"""CLI views: import, export and transfer logs."""

from scripts.cli.util import fmt_price, fmt_timestamp


def show_import_log(ledger):
    records = ledger.import_log()
    if not records:
        print("\n  No imports recorded.\n")
        return
    print()
    print(f"  {'ID':>5} {'Batch':>5}  {'Medicine':<26} {'WH':>4} {'Qty':>7} {'Price':>10}  {'When':<16} {'Supplier':>8}")
    print(f"  {'-'*5} {'-'*5}  {'-'*26} {'-'*4} {'-'*7} {'-'*10}  {'-'*16} {'-'*8}")
    for r in records:
        supplier = str(r.supplier_id) if r.supplier_id is not None else ""
        print(
            f"  {r.id:>5} {r.batch_id:>5}  {r.medicine_name[:26]:<26} {r.warehouse_id:>4} "
            f"{r.quantity:>7} {fmt_price(r.price):>10}  {fmt_timestamp(r.timestamp):<16} {supplier:>8}"
        )
    print()


def show_export_log(ledger):
    records = ledger.export_log()
    if not records:
        print("\n  No sales recorded.\n")
        return
    print()
    print(f"  {'ID':>5}  {'Medicine':<26} {'WH':>4} {'Qty':>7} {'Avg price':>10}  {'When':<16} {'Batches'}")
    print(f"  {'-'*5}  {'-'*26} {'-'*4} {'-'*7} {'-'*10}  {'-'*16} {'-'*12}")
    for r in records:
        batches = ",".join(str(d.batch_id) for d in r.draws)
        print(
            f"  {r.id:>5}  {r.medicine_name[:26]:<26} {r.warehouse_id:>4} {r.amount:>7} "
            f"{fmt_price(r.price):>10}  {fmt_timestamp(r.timestamp):<16} {batches}"
        )
    print()


def show_transfer_log(ledger):
    records = ledger.transfer_log()
    if not records:
        print("\n  No transfers recorded.\n")
        return
    print()
    print(f"  {'ID':>5} {'Batch':>5} {'New':>5}  {'Medicine':<26} {'From':>4} {'To':>4} {'Qty':>7}  {'When'}")
    print(f"  {'-'*5} {'-'*5} {'-'*5}  {'-'*26} {'-'*4} {'-'*4} {'-'*7}  {'-'*16}")
    for r in records:
        print(
            f"  {r.id:>5} {r.batch_id:>5} {r.new_batch_id:>5}  {r.medicine_name[:26]:<26} "
            f"{r.from_warehouse_id:>4} {r.to_warehouse_id:>4} {r.quantity:>7}  {fmt_timestamp(r.timestamp)}"
        )
    print()
