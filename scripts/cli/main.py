"""CLI main: argument parsing, command dispatch, interactive shell."""

import argparse
import shlex
import sys
import uuid

from scripts.cli import config as cli_config
from scripts.cli.views import (
    show_batches,
    show_expiring,
    show_export_log,
    show_import_log,
    show_medicines,
    show_sale,
    show_settings,
    show_summary,
    show_suppliers,
    show_transfer_log,
    show_warehouses,
)
from stock_config.loader import resolve_config_path, save_settings
from stock_kernel.exceptions import StockKernelError
from stock_kernel.logging_config import LogContext, configure_logging, get_logger

logger = get_logger("cli")

# (command, action) pairs that change ledger state and trigger a snapshot save.
# "config" and "shell" run outside the ledger and are handled in main().
MUTATING = {
    ("warehouse", "add"),
    ("warehouse", "edit"),
    ("medicine", "add"),
    ("medicine", "rename"),
    ("medicine", "delete"),
    ("supplier", "add"),
    ("import", None),
    ("transfer", None),
    ("sell", None),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stock-ledger",
        description="Pharmacy stock ledger: batches, transfers, FEFO sales.",
    )
    parser.add_argument("--config", help="settings YAML (default: $STOCK_LEDGER_CONFIG or stock_ledger.yaml)")
    parser.add_argument("--data-file", help="override the snapshot file from settings")
    parser.add_argument("--log-level", help="override the log level from settings")

    sub = parser.add_subparsers(dest="command", required=True)

    wh = sub.add_parser("warehouse", help="manage warehouses")
    wh_sub = wh.add_subparsers(dest="action", required=True)
    p = wh_sub.add_parser("add")
    p.add_argument("name")
    p.add_argument("--type", default="hub", help="hub | point_of_sale (pos)")
    p = wh_sub.add_parser("edit")
    p.add_argument("warehouse_id", type=int)
    p.add_argument("--name")
    p.add_argument("--type")
    wh_sub.add_parser("list")

    med = sub.add_parser("medicine", help="manage the medicine catalog")
    med_sub = med.add_subparsers(dest="action", required=True)
    p = med_sub.add_parser("add")
    p.add_argument("name")
    p = med_sub.add_parser("rename")
    p.add_argument("medicine_id", type=int)
    p.add_argument("name")
    p = med_sub.add_parser("delete")
    p.add_argument("medicine_id", type=int)
    med_sub.add_parser("list")

    sup = sub.add_parser("supplier", help="manage suppliers")
    sup_sub = sup.add_subparsers(dest="action", required=True)
    p = sup_sub.add_parser("add")
    p.add_argument("name")
    p.add_argument("--contact", default="")
    sup_sub.add_parser("list")

    p = sub.add_parser("import", help="receive stock as a new batch")
    p.add_argument("medicine_id", type=int)
    p.add_argument("warehouse_id", type=int)
    p.add_argument("quantity", type=int)
    p.add_argument("price")
    p.add_argument("expiry", help="YYYY-MM-DD or ISO-8601 timestamp")
    p.add_argument("--name", help="medicine name (default: catalog name)")
    p.add_argument("--supplier", type=int)

    p = sub.add_parser("transfer", help="move part of a batch to another warehouse")
    p.add_argument("batch_id", type=int)
    p.add_argument("to_warehouse_id", type=int)
    p.add_argument("quantity", type=int)

    p = sub.add_parser("sell", help="sell from a point of sale, soonest expiry first")
    p.add_argument("medicine_id", type=int)
    p.add_argument("quantity", type=int)
    p.add_argument("--pos", type=int, help="point-of-sale warehouse id")

    p = sub.add_parser("batches", help="list stock batches")
    p.add_argument("--warehouse", type=int)
    p.add_argument("--medicine", type=int)
    p.add_argument("--available", action="store_true", help="hide drained batches")

    p = sub.add_parser("expiring", help="batches expiring soon")
    p.add_argument("--days", type=int, help="horizon in days (default: expiry_alert_days)")

    p = sub.add_parser("log", help="movement history")
    p.add_argument("stream", choices=("import", "export", "transfer"))

    cfg = sub.add_parser("config", help="settings file")
    cfg_sub = cfg.add_subparsers(dest="action", required=True)
    p = cfg_sub.add_parser("init", help="write the effective settings to the settings file")
    p.add_argument("--force", action="store_true", help="overwrite an existing file")
    cfg_sub.add_parser("show", help="print the effective settings")

    sub.add_parser("summary", help="available units per medicine and warehouse")
    sub.add_parser("shell", help="read commands interactively")
    return parser


def run_command(args, ledger, settings) -> bool:
    """Execute one parsed command. Returns True if ledger state changed."""
    command = args.command
    action = getattr(args, "action", None)

    if command == "warehouse":
        if action == "add":
            w = ledger.add_warehouse(args.name, args.type)
            print(f"  Warehouse {w.id} added: {w.name} ({w.type.value})")
        elif action == "edit":
            w = ledger.edit_warehouse(args.warehouse_id, name=args.name, type=args.type)
            print(f"  Warehouse {w.id} is now: {w.name} ({w.type.value})")
        else:
            show_warehouses(ledger)
    elif command == "medicine":
        if action == "add":
            m = ledger.add_medicine(args.name)
            print(f"  Medicine {m.id} added: {m.name}")
        elif action == "rename":
            m = ledger.rename_medicine(args.medicine_id, args.name)
            print(f"  Medicine {m.id} renamed: {m.name}")
        elif action == "delete":
            m = ledger.delete_medicine(args.medicine_id)
            print(f"  Medicine {m.id} deleted: {m.name}")
        else:
            show_medicines(ledger)
    elif command == "supplier":
        if action == "add":
            s = ledger.add_supplier(args.name, args.contact)
            print(f"  Supplier {s.id} added: {s.name}")
        else:
            show_suppliers(ledger)
    elif command == "import":
        name = args.name or ledger.get_medicine(args.medicine_id).name
        batch_id = ledger.import_stock(
            medicine_id=args.medicine_id,
            medicine_name=name,
            warehouse_id=args.warehouse_id,
            quantity=args.quantity,
            unit_price=args.price,
            expiry_date=args.expiry,
            supplier_id=args.supplier,
        )
        print(f"  Imported batch {batch_id}: {args.quantity} x {name} into warehouse {args.warehouse_id}")
    elif command == "transfer":
        new_batch_id = ledger.transfer(args.batch_id, args.to_warehouse_id, args.quantity)
        print(
            f"  Transferred {args.quantity} from batch {args.batch_id} "
            f"to warehouse {args.to_warehouse_id} as batch {new_batch_id}"
        )
    elif command == "sell":
        show_sale(ledger.sell(args.medicine_id, args.quantity, pos_warehouse=args.pos))
    elif command == "batches":
        show_batches(ledger, args.warehouse, args.medicine, args.available)
    elif command == "expiring":
        show_expiring(ledger, args.days if args.days is not None else settings.expiry_alert_days)
    elif command == "log":
        {"import": show_import_log, "export": show_export_log, "transfer": show_transfer_log}[args.stream](ledger)
    elif command == "summary":
        show_summary(ledger)

    return (command, action) in MUTATING


def run_config(args, settings) -> int:
    """
    ``config init`` writes the effective settings (file, environment and
    flags combined) so later runs pick them up; ``config show`` prints them.
    """
    path = resolve_config_path(args.config)
    if args.action == "show":
        show_settings(settings, path if path.exists() else f"{path} (not found, defaults)")
        return 0

    if path.exists() and not args.force:
        print(f"error: {path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    try:
        save_settings(settings, path)
    except OSError as exc:
        print(f"error: could not write {path}: {exc}", file=sys.stderr)
        return 1
    print(f"  Settings written to {path}")
    return 0


def _execute(args, ledger, store, settings) -> int:
    """Run one command, persist on mutation, map ledger and save errors to exit 1."""
    with LogContext.bind(command=" ".join(filter(None, (args.command, getattr(args, "action", None))))):
        try:
            mutated = run_command(args, ledger, settings)
        except StockKernelError as exc:
            print(f"error [{exc.code}]: {exc}", file=sys.stderr)
            return 1
        if mutated:
            try:
                store.save(ledger.snapshot())
            except OSError as exc:
                logger.error("snapshot_save_failed", exc_info=True, extra={"path": str(store.path)})
                print(f"error: could not save {store.path}: {exc}", file=sys.stderr)
                return 1
    return 0


def run_shell(parser, ledger, store, settings, stdin=None) -> int:
    """
    Read commands line by line until the cancel keyword or end of input.

    Returns the exit status of the last command run.
    """
    stream = stdin if stdin is not None else sys.stdin
    interactive = stream.isatty() if hasattr(stream, "isatty") else False
    status = 0
    print(f"  Stock ledger shell. Type '{settings.cancel_keyword}' to leave.")

    while True:
        if interactive:
            print("stock> ", end="", flush=True)
        line = stream.readline()
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        if line.lower() == settings.cancel_keyword.lower():
            break
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            status = 2
            continue
        try:
            args = parser.parse_args(tokens)
        except SystemExit as exc:
            status = exc.code if isinstance(exc.code, int) else 2
            continue
        if args.command in ("shell", "config"):
            print(f"error: '{args.command}' is not available inside the shell", file=sys.stderr)
            status = 2
            continue
        status = _execute(args, ledger, store, settings)

    print("  Goodbye.")
    return status


def main(argv=None, *, clock=None, stdin=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = cli_config.resolve_settings(args.config, args.data_file, args.log_level)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(level=settings.log_level.upper())
    LogContext.set(correlation_id=str(uuid.uuid4()))
    logger.debug("cli_started", extra={"data_file": settings.data_file})

    if args.command == "config":
        return run_config(args, settings)

    ledger, store = cli_config.open_ledger(settings, clock=clock)

    if args.command == "shell":
        return run_shell(parser, ledger, store, settings, stdin=stdin)
    return _execute(args, ledger, store, settings)


if __name__ == "__main__":
    sys.exit(main())
