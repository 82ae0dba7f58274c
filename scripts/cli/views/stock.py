"""CLI views: batches, expiry alerts, stock summary, sale receipt."""

from scripts.cli.util import fmt_date, fmt_price


def _batch_table(batches, title):
    W = 96
    print()
    print("=" * W)
    print(f"  {title}".center(W))
    print("=" * W)
    print(
        f"  {'Batch':>5} {'Med':>5}  {'Medicine':<26} {'WH':>4} {'Qty':>7} "
        f"{'Price':>10}  {'Expiry':<10}  {'From':>5}"
    )
    print(f"  {'-'*5} {'-'*5}  {'-'*26} {'-'*4} {'-'*7} {'-'*10}  {'-'*10}  {'-'*5}")
    for b in batches:
        source = str(b.source_batch_id) if b.source_batch_id is not None else ""
        print(
            f"  {b.id:>5} {b.medicine_id:>5}  {b.medicine_name[:26]:<26} {b.warehouse_id:>4} "
            f"{b.quantity:>7} {fmt_price(b.unit_price):>10}  {fmt_date(b.expiry_date):<10}  {source:>5}"
        )
    print(f"\n  Total: {len(batches)} batches")
    print()


def show_batches(ledger, warehouse_id=None, medicine_id=None, available_only=False):
    """List stock batches, optionally filtered."""
    batches = ledger.batches(
        warehouse_id=warehouse_id,
        medicine_id=medicine_id,
        include_depleted=not available_only,
    )
    if not batches:
        print("\n  No batches.\n")
        return
    _batch_table(batches, "STOCK BATCHES")


def show_expiring(ledger, days):
    """Batches expiring within ``days`` days, soonest first."""
    batches = ledger.expiring_within(days)
    if not batches:
        print(f"\n  Nothing expires within {days} days.\n")
        return
    _batch_table(batches, f"EXPIRING WITHIN {days} DAYS")


def show_summary(ledger):
    """Available units per medicine and warehouse."""
    summary = ledger.stock_summary()
    if not summary:
        print("\n  No stock on hand.\n")
        return
    names = {b.medicine_id: b.medicine_name for b in ledger.batches()}
    print()
    print(f"  {'Med':>5}  {'Medicine':<30} {'WH':>4} {'Qty':>8}")
    print(f"  {'-'*5}  {'-'*30} {'-'*4} {'-'*8}")
    for (medicine_id, warehouse_id), qty in sorted(summary.items()):
        print(f"  {medicine_id:>5}  {names.get(medicine_id, '')[:30]:<30} {warehouse_id:>4} {qty:>8}")
    print()


def show_sale(record):
    """Receipt for one FEFO sale."""
    print(
        f"\n  Sold {record.amount} x {record.medicine_name} from warehouse "
        f"{record.warehouse_id} at {fmt_price(record.price)} avg (export #{record.id})"
    )
    for d in record.draws:
        print(f"    batch {d.batch_id:>5}: {d.quantity:>6} @ {fmt_price(d.unit_price)}")
    print()
