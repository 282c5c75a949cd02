import argparse
import json
from pathlib import Path
from typing import Any, Dict

from . import __version__
from .calculations import (
    distribute_evenly,
    net_price,
    net_price_to_rating,
    rank_schools,
    total_weight,
    weight_feedback,
)
from .catalog import search_schools
from .config import Settings
from .env import load_env
from .errors import CollegeMatrixError, InvalidCodeError
from .guard import PersistenceGuard
from .logger import get_logger
from .models import COST_FIELDS, CostData, UserData, WRITABLE_FIELDS
from .premium import redeem_code
from .schema import validate_user_document
from .storage import DocumentStore


def build_guard(settings: Settings) -> PersistenceGuard:
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    store = DocumentStore(settings.db_path)
    return PersistenceGuard(store, delay_ms=settings.save_delay_ms, logger=logger)


def partial_from_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Writable fields present in a stored-layout document, as UserData values."""
    data = UserData.from_doc("", doc)
    doc_keys = {v: k for k, v in WRITABLE_FIELDS.items()}
    return {doc_keys[k]: getattr(data, doc_keys[k]) for k in doc if k in doc_keys}


def _load_or_exit(guard: PersistenceGuard, user_id: str) -> UserData:
    data = guard.load(user_id)
    if data is None:
        raise SystemExit(f"No data for user: {user_id}")
    return data


def cmd_init_db(args: argparse.Namespace) -> None:
    DocumentStore(args.settings.db_path)
    print(f"Database ready: {args.settings.db_path}")


def cmd_list(args: argparse.Namespace) -> None:
    store = DocumentStore(args.settings.db_path)
    ids = store.list_ids()
    if not ids:
        print("No users in store.")
        return
    print(f"Found {len(ids)} users in {args.settings.db_path}:")
    for user_id in ids:
        print(f" - {user_id}")


def cmd_show(args: argparse.Namespace) -> None:
    data = _load_or_exit(args.guard, args.user)
    print(f"User: {data.user_id}")
    print(f"  Email: {data.email}")
    print(f"  Premium: {'yes' if data.is_premium else 'no'}")
    print(f"  Updated: {data.updated_at}")
    print("  Categories:")
    for c in data.categories:
        print(f"    {c.name} ({data.weights.get(c.id, 0):.1f}%)")
    total = total_weight({c.id: data.weights.get(c.id, 0) for c in data.categories})
    print(f"  Total weight: {total:.1f}%")
    print("  Schools:")
    for s in data.schools:
        price = net_price(data.costs.get(s.id) or CostData())
        print(f"    {s.name} - {s.location} (net price ${price:,.0f})")


def cmd_rank(args: argparse.Namespace) -> None:
    data = _load_or_exit(args.guard, args.user)
    weights = {c.id: data.weights.get(c.id, 0) for c in data.categories}
    feedback = weight_feedback(weights, args.settings.weight_tolerance)
    if feedback:
        print(f"[warn] Weights do not total 100%: {feedback}")
    ranked = rank_schools(data.schools, data.ratings, weights)
    if not ranked:
        print("No schools to rank.")
        return
    for i, (school, score) in enumerate(ranked, 1):
        print(f"#{i} {school.name:<40} {score:>6.2f}")


def cmd_net_price(args: argparse.Namespace) -> None:
    costs = CostData(**{f: getattr(args, f) for f in COST_FIELDS})
    price = net_price(costs)
    rating = net_price_to_rating(price, args.settings.net_price_ceiling)
    print(f"Net price: ${price:,.2f}")
    print(f"Rating: {rating:.1f}/10")


def cmd_distribute(args: argparse.Namespace) -> None:
    ids = [c.strip() for c in args.categories.split(",") if c.strip()]
    if not ids:
        raise SystemExit("No categories specified. Use --categories \"net-price,major\"")
    for cid, weight in distribute_evenly(ids).items():
        print(f"{cid}: {weight:.1f}%")


def cmd_search(args: argparse.Namespace) -> None:
    results = search_schools(args.query)
    if not results:
        print("No matching schools.")
        return
    for s in results:
        conf = f" [{s.conference}]" if s.conference else ""
        print(f"{s.name} - {s.city}, {s.state}{conf}")


def cmd_import(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        doc = json.load(f)
    errors = validate_user_document(doc)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    written = args.guard.save(args.user, partial_from_document(doc))
    print(f"User: {args.user}")
    print(f"Status: {'saved' if written else 'refused (empty categories)'}")


def cmd_export(args: argparse.Namespace) -> None:
    doc = args.guard.store.get(args.user)
    if doc is None:
        raise SystemExit(f"No data for user: {args.user}")
    text = json.dumps(doc, indent=2, ensure_ascii=False, default=str)
    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        print(f"Exported {args.user} to {out}")
    else:
        print(text)


def cmd_redeem_code(args: argparse.Namespace) -> None:
    try:
        redeem_code(args.guard, args.user, args.code, args.settings.dev_codes)
    except InvalidCodeError as e:
        raise SystemExit(str(e))
    print(f"Premium enabled for {args.user}")


def cmd_set_premium(args: argparse.Namespace) -> None:
    args.guard.update_premium_status(args.user, not args.revoke)
    print(f"Premium {'revoked' if args.revoke else 'granted'} for {args.user}")


NEEDS_GUARD = {cmd_show, cmd_rank, cmd_import, cmd_export, cmd_redeem_code, cmd_set_premium}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="collegematrix", description="College decision matrix CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: COLLEGEMATRIX_DB_PATH or data/collegematrix.db)")

    subparsers = parser.add_subparsers(dest="command")

    init = subparsers.add_parser("init-db", help="Create the database and tables")
    init.set_defaults(func=cmd_init_db)

    lst = subparsers.add_parser("list", help="List stored user ids")
    lst.set_defaults(func=cmd_list)

    show = subparsers.add_parser("show", help="Show a user's categories, weights and schools")
    show.add_argument("--user", required=True, help="User id")
    show.set_defaults(func=cmd_show)

    rank = subparsers.add_parser("rank", help="Rank a user's schools by composite score")
    rank.add_argument("--user", required=True, help="User id")
    rank.set_defaults(func=cmd_rank)

    npr = subparsers.add_parser("net-price", help="Compute net price and its 0-10 rating")
    for f in COST_FIELDS:
        npr.add_argument(f"--{f}", type=float, default=0.0, help=f"Annual {f} (default 0)")
    npr.set_defaults(func=cmd_net_price)

    dist = subparsers.add_parser("distribute", help="Split 100%% evenly across categories")
    dist.add_argument("--categories", required=True, help="Comma-separated category ids; the first absorbs the remainder")
    dist.set_defaults(func=cmd_distribute)

    srch = subparsers.add_parser("search", help="Search the built-in school catalog")
    srch.add_argument("--query", required=True, help="Name, city or state (at least 2 characters)")
    srch.set_defaults(func=cmd_search)

    imp = subparsers.add_parser("import", help="Save a user document JSON through the persistence guard")
    imp.add_argument("--user", required=True, help="User id")
    imp.add_argument("--input", required=True, help="Path to document JSON (stored layout)")
    imp.set_defaults(func=cmd_import)

    exp = subparsers.add_parser("export", help="Print or write a user's stored document")
    exp.add_argument("--user", required=True, help="User id")
    exp.add_argument("--output", help="Write to this file instead of stdout")
    exp.set_defaults(func=cmd_export)

    red = subparsers.add_parser("redeem-code", help="Enable premium with a dev code")
    red.add_argument("--user", required=True, help="User id")
    red.add_argument("--code", required=True, help="Premium code")
    red.set_defaults(func=cmd_redeem_code)

    prem = subparsers.add_parser("set-premium", help="Grant (or revoke) premium for a user")
    prem.add_argument("--user", required=True, help="User id")
    prem.add_argument("--revoke", action="store_true", help="Revoke instead of grant")
    prem.set_defaults(func=cmd_set_premium)

    return parser


def main(argv=None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.settings = Settings.from_env()
        if args.db:
            args.settings.db_path = Path(args.db)
        if args.func in NEEDS_GUARD:
            args.guard = build_guard(args.settings)
        args.func(args)
    except CollegeMatrixError as e:
        raise SystemExit(f"Error: {e}")


if __name__ == "__main__":
    main()
