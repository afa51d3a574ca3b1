"""Command-line interface for ranchhand."""

import argparse
import json
import sys

from . import __version__, config
from .auth import Actor
from .errors import RanchError
from .models import LOG_CATEGORIES
from .pricing import format_currency
from .ranch import Ranch


def get_ranch() -> Ranch:
    """Get services over the configured data directory."""
    return Ranch(config.DATA_DIR)


def get_actor(args: argparse.Namespace) -> Actor:
    """The operator running the command; the CLI acts as an admin unless told otherwise."""
    return Actor(id=args.actor_id, name=args.actor_name or args.actor_id, role=args.role)


def cmd_fund_balance(args: argparse.Namespace) -> int:
    """Show the ranch fund balance."""
    try:
        balance = get_ranch().fund.balance()

        if args.json:
            print(json.dumps({"balance": str(balance)}, indent=2))
        else:
            print(f"Ranch fund: {format_currency(balance)}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_fund_history(args: argparse.Namespace) -> int:
    """Show recent ranch fund log entries."""
    try:
        entries = get_ranch().fund.history(limit=args.limit)

        if args.json:
            print(json.dumps([e.to_dict() for e in entries], indent=2))
            return 0

        if not entries:
            print("No ranch fund activity yet.")
            return 0

        for e in entries:
            who = e.actor_name or "unknown"
            print(
                f"  {e.at[:19]}  {e.type:<10}  {format_currency(e.amount):>10}  "
                f"-> {format_currency(e.balance_after):>10}  {who}"
            )
            if e.description:
                print(f"      {e.description}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_fund_change(args: argparse.Namespace) -> int:
    """Deposit, withdraw or adjust the ranch fund."""
    try:
        fund = get_ranch().fund
        actor = get_actor(args)
        operations = {
            "deposit": fund.deposit,
            "withdraw": fund.withdraw,
            "adjust": fund.adjust,
        }
        entry = operations[args.fund_command](args.amount, args.description or "", actor)

        if args.json:
            print(json.dumps(entry.to_dict(), indent=2))
        else:
            print(f"Recorded {entry.type} of {format_currency(entry.amount)}")
            print(f"Balance: {format_currency(entry.balance_after)}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_orders_stats(args: argparse.Namespace) -> int:
    """Show dashboard figures for orders."""
    try:
        stats = get_ranch().orders.stats()

        if args.json:
            print(json.dumps(stats.to_dict(), indent=2))
        else:
            print(f"Outstanding:        {format_currency(stats.total_outstanding)}")
            print(f"Deposits held:      {format_currency(stats.total_deposits)}")
            print(f"Delivered today:    {stats.completed_today}")
            print(f"Ready for delivery: {stats.pending_deliveries}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_orders_list(args: argparse.Namespace) -> int:
    """List orders."""
    try:
        orders = get_ranch().orders.list(status=args.status, search=args.search)

        if args.json:
            print(json.dumps([o.to_dict() for o in orders], indent=2))
            return 0

        if not orders:
            print("No orders.")
            return 0

        print(f"Orders ({len(orders)}):")
        print()
        for o in orders:
            print(f"  {o.id[:8]}  {o.status:<11}  {format_currency(o.price):>10}  {o.customer_name}")
            if o.description:
                print(f"            {o.description}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_quotes_reconcile(args: argparse.Namespace) -> int:
    """Resolve quote conversions that were interrupted."""
    try:
        outcomes = get_ranch().quotes.reconcile_conversions(get_actor(args))

        if args.json:
            data = [
                {"quote_id": o.quote_id, "outcome": o.outcome, "order_id": o.order_id}
                for o in outcomes
            ]
            print(json.dumps(data, indent=2))
            return 0

        if not outcomes:
            print("No stalled conversions.")
            return 0

        for o in outcomes:
            if o.order_id:
                print(f"  {o.quote_id[:8]}  {o.outcome} -> order {o.order_id[:8]}")
            else:
                print(f"  {o.quote_id[:8]}  {o.outcome}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_catalog_import_defaults(args: argparse.Namespace) -> int:
    """Seed the price catalog with the default price list."""
    try:
        added = get_ranch().catalog.import_defaults(get_actor(args))

        if args.json:
            print(json.dumps([i.to_dict() for i in added], indent=2))
        elif added:
            print(f"Imported {len(added)} default prices.")
        else:
            print("Catalog already has every default price.")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_logs_list(args: argparse.Namespace) -> int:
    """Show the ranch log book."""
    try:
        entries = get_ranch().logs.list(category=args.category, limit=args.limit)

        if args.json:
            print(json.dumps([e.to_dict() for e in entries], indent=2))
            return 0

        if not entries:
            print("No log entries.")
            return 0

        for e in entries:
            amount = f"  {format_currency(e.amount)}" if e.amount is not None else ""
            print(f"  {e.created_at[:19]}  {e.category:<9}  {e.description}{amount}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_logs_add(args: argparse.Namespace) -> int:
    """Add an entry to the ranch log book."""
    try:
        entry = get_ranch().logs.create(
            {"description": args.description, "amount": args.amount, "category": args.category},
            get_actor(args),
        )

        if args.json:
            print(json.dumps(entry.to_dict(), indent=2))
        else:
            print(f"Logged [{entry.category}]: {entry.description}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_activity(args: argparse.Namespace) -> int:
    """Show the recent activity feed."""
    try:
        entries = get_ranch().activity.recent(limit=args.limit)

        if args.json:
            print(json.dumps([e.to_dict() for e in entries], indent=2))
            return 0

        if not entries:
            print("No activity yet.")
            return 0

        for e in entries:
            print(f"  {e.at[:19]}  {e.actor_name or 'unknown'}: {e.action}")
        return 0

    except RanchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    try:
        import uvicorn

        print("Starting ranchhand API server...")
        print(f"Data directory: {config.DATA_DIR}")
        print(f"API docs: http://{args.host}:{args.port}/docs")
        print()

        # When reload is enabled, uvicorn requires the app as an import string
        app_target = "ranchhand.api:app" if args.reload else None
        if app_target is None:
            from .api import app
            app_target = app

        uvicorn.run(
            app_target,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=1,
            log_level=config.LOG_LEVEL.lower(),
        )
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Output as JSON")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ranchhand",
        description="Orders, quotes, the ranch fund and the ranch map.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--actor-id", default="cli", help="ID recorded as the acting user (default: cli)"
    )
    parser.add_argument("--actor-name", help="Display name of the acting user")
    parser.add_argument(
        "--role", default="admin", choices=["admin", "member", "guest"],
        help="Role of the acting user (default: admin)",
    )
    parser.add_argument("--log-level", help=f"Logging level (default: {config.LOG_LEVEL})")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # fund
    fund_parser = subparsers.add_parser("fund", help="Ranch fund balance and log")
    fund_subparsers = fund_parser.add_subparsers(dest="fund_command", help="Fund commands")

    fund_balance_parser = fund_subparsers.add_parser("balance", help="Show the balance")
    _add_json_flag(fund_balance_parser)

    fund_history_parser = fund_subparsers.add_parser("history", help="Show the fund log")
    fund_history_parser.add_argument(
        "--limit", "-n", type=int, default=20, help="Entries to show (default: 20)"
    )
    _add_json_flag(fund_history_parser)

    for name, help_text in (
        ("deposit", "Add money to the fund"),
        ("withdraw", "Take money out of the fund"),
        ("adjust", "Set the balance outright"),
    ):
        change_parser = fund_subparsers.add_parser(name, help=help_text)
        change_parser.add_argument("amount", help="Amount, e.g. 12.50")
        change_parser.add_argument("--description", "-d", help="What the money was for")
        _add_json_flag(change_parser)

    # orders
    orders_parser = subparsers.add_parser("orders", help="Inspect orders")
    orders_subparsers = orders_parser.add_subparsers(dest="orders_command", help="Order commands")

    orders_list_parser = orders_subparsers.add_parser("list", help="List orders")
    orders_list_parser.add_argument("--status", "-s", help="Only orders with this status")
    orders_list_parser.add_argument("--search", help="Match customer name or description")
    _add_json_flag(orders_list_parser)

    orders_stats_parser = orders_subparsers.add_parser("stats", help="Dashboard figures")
    _add_json_flag(orders_stats_parser)

    # quotes
    quotes_parser = subparsers.add_parser("quotes", help="Manage quotes")
    quotes_subparsers = quotes_parser.add_subparsers(dest="quotes_command", help="Quote commands")

    quotes_reconcile_parser = quotes_subparsers.add_parser(
        "reconcile", help="Finish or undo interrupted quote conversions"
    )
    _add_json_flag(quotes_reconcile_parser)

    # catalog
    catalog_parser = subparsers.add_parser("catalog", help="Manage the price catalog")
    catalog_subparsers = catalog_parser.add_subparsers(
        dest="catalog_command", help="Catalog commands"
    )

    catalog_import_parser = catalog_subparsers.add_parser(
        "import-defaults", help="Seed the default price list"
    )
    _add_json_flag(catalog_import_parser)

    # logs
    logs_parser = subparsers.add_parser("logs", help="Ranch log book")
    logs_subparsers = logs_parser.add_subparsers(dest="logs_command", help="Log commands")

    logs_list_parser = logs_subparsers.add_parser("list", help="Show log entries")
    logs_list_parser.add_argument(
        "--category", "-c", help=f"Only this category ({', '.join(LOG_CATEGORIES)})"
    )
    logs_list_parser.add_argument("--limit", "-n", type=int, help="Entries to show")
    _add_json_flag(logs_list_parser)

    logs_add_parser = logs_subparsers.add_parser("add", help="Add a log entry")
    logs_add_parser.add_argument("description", help="What happened")
    logs_add_parser.add_argument("--amount", "-a", help="Money involved, if any")
    logs_add_parser.add_argument(
        "--category", "-c", default="misc", choices=LOG_CATEGORIES,
        help="Category (default: misc)",
    )
    _add_json_flag(logs_add_parser)

    # activity
    activity_parser = subparsers.add_parser("activity", help="Show recent activity")
    activity_parser.add_argument(
        "--limit", "-n", type=int, default=config.ACTIVITY_FEED_DEFAULT_LIMIT,
        help=f"Entries to show (default: {config.ACTIVITY_FEED_DEFAULT_LIMIT})",
    )
    _add_json_flag(activity_parser)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    return parser


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    config.configure_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return 0

    # Handle grouped subcommands
    groups = {
        "fund": ("fund_command", {
            "balance": cmd_fund_balance,
            "history": cmd_fund_history,
            "deposit": cmd_fund_change,
            "withdraw": cmd_fund_change,
            "adjust": cmd_fund_change,
        }),
        "orders": ("orders_command", {
            "list": cmd_orders_list,
            "stats": cmd_orders_stats,
        }),
        "quotes": ("quotes_command", {
            "reconcile": cmd_quotes_reconcile,
        }),
        "catalog": ("catalog_command", {
            "import-defaults": cmd_catalog_import_defaults,
        }),
        "logs": ("logs_command", {
            "list": cmd_logs_list,
            "add": cmd_logs_add,
        }),
    }
    if args.command in groups:
        dest, handlers = groups[args.command]
        subcommand = getattr(args, dest, None)
        if not subcommand:
            parser.parse_args([args.command, "--help"])
            return 0
        return handlers[subcommand](args)

    commands = {
        "activity": cmd_activity,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
