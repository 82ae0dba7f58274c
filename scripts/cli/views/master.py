"""CLI views: warehouses, medicines, suppliers."""


def show_warehouses(ledger):
    """List warehouses with their role."""
    warehouses = ledger.warehouses()
    if not warehouses:
        print("\n  No warehouses defined.\n")
        return
    W = 60
    print()
    print("=" * W)
    print("  WAREHOUSES".center(W))
    print("=" * W)
    print(f"  {'ID':>4}  {'Name':<32} {'Type'}")
    print(f"  {'-'*4}  {'-'*32} {'-'*14}")
    for w in warehouses:
        print(f"  {w.id:>4}  {w.name[:32]:<32} {w.type.value}")
    print(f"\n  Total: {len(warehouses)} warehouses")
    print()


def show_medicines(ledger):
    medicines = ledger.medicines()
    if not medicines:
        print("\n  No medicines in the catalog.\n")
        return
    print()
    print(f"  {'ID':>4}  {'Name'}")
    print(f"  {'-'*4}  {'-'*40}")
    for m in medicines:
        print(f"  {m.id:>4}  {m.name}")
    print(f"\n  Total: {len(medicines)} medicines")
    print()


def show_suppliers(ledger):
    suppliers = ledger.suppliers()
    if not suppliers:
        print("\n  No suppliers defined.\n")
        return
    print()
    print(f"  {'ID':>4}  {'Name':<32} {'Contact'}")
    print(f"  {'-'*4}  {'-'*32} {'-'*24}")
    for s in suppliers:
        print(f"  {s.id:>4}  {s.name[:32]:<32} {s.contact}")
    print(f"\n  Total: {len(suppliers)} suppliers")
    print()
