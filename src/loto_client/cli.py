from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .client import LotoClient
from .config import ensure_config_exists, get_config_path, load_config
from .cookies import COOKIES_FILE_NAME, CookieStore
from .errors import CredentialsMissingError, LotoClientError, TransportError
from .logging_utils import setup_logging
from .models import PAIRED_GAMES, Extraction
from .session import SessionManager
from .stats import compute_stats
from .storage import write_csv, write_json


logger = logging.getLogger(__name__)


def _config_path(args: argparse.Namespace) -> Path:
    return Path(args.config) if args.config else get_config_path()


def _client(args: argparse.Namespace, login: bool) -> LotoClient:
    path = _config_path(args)
    if ensure_config_exists(path):
        logger.error("Config file created at: %s. Please edit it with your credentials and try again.", path)
        raise SystemExit(1)

    cfg = load_config(path)
    client = LotoClient(cfg, cookies_path=path.parent / COOKIES_FILE_NAME)
    if login:
        logger.info("Logging in to loto.ro...")
        client.login()
    return client


def format_numbers(nums) -> str:
    return " ".join(str(n) for n in nums)


def format_extraction(ext: Extraction) -> str:
    lines = [f"=== {ext.game} ===", f"Date: {ext.date}"]
    if ext.game in PAIRED_GAMES.values():
        # Paired games publish one number, stored as one ball per digit.
        lines.append("Number: " + "".join(str(d) for d in ext.numbers))
    else:
        lines.append("Numbers: " + format_numbers(ext.numbers))
        if ext.bonus:
            lines.append("Bonus: " + format_numbers(ext.bonus))
    return "\n".join(lines)


def _cmd_results(args: argparse.Namespace) -> None:
    client = _client(args, login=False)
    print("\n\n".join(format_extraction(e) for e in client.get_results()))


def _cmd_tickets(args: argparse.Namespace) -> None:
    client = _client(args, login=True)
    tickets = client.get_all_tickets()
    if not tickets:
        print("No tickets found.")
        return

    row = "%-14s %-12s %-14s %-10s %-12s %s"
    print(row % ("Game", "Ticket ID", "Draw Date", "Status", "Price", "Prize"))
    print("-" * 78)
    for t in tickets:
        print(row % (t.game or "Unknown", t.ticket_id, t.draw_date, t.status, t.price, t.prize))
    print("-" * 78)
    print(f"Total: {len(tickets)} ticket(s)")


def _cmd_stats(args: argparse.Namespace) -> None:
    client = _client(args, login=True)
    st = compute_stats(client.get_all_tickets())
    if st.total_tickets == 0:
        print("No ticket data available for stats.")
        return

    print(f"Total Tickets     {st.total_tickets}")
    print(f"Total Spent       {st.total_spent:.2f} RON")
    print(f"Total Won         {st.total_won:.2f} RON")
    print(f"Net Result        {st.net_result:+.2f} RON")
    print(f"Avg Ticket Price  {st.avg_price:.2f} RON")
    if st.first_draw:
        print(f"Date Range        {st.first_draw} -> {st.last_draw}")
    print(f"Won / Lost        {st.won_count} / {st.lost_count}")
    if st.pending_count:
        print(f"Pending           {st.pending_count}")
    print(f"Win Rate          {st.win_rate:.1f}%")
    for g in st.by_game:
        print(f"{g.game}: {g.tickets} tickets, {g.spent:.2f} RON spent, {g.won} won ({g.won_amount:.2f} RON)")


def _cmd_export(args: argparse.Namespace) -> None:
    client = _client(args, login=True)
    output_dir = Path(args.output_dir)

    results = client.get_results()
    tickets = client.get_all_tickets()

    write_json(output_dir / "results.json", results)
    write_json(output_dir / "tickets.json", tickets)
    if args.csv:
        write_csv(output_dir / "results.csv", results)
        write_csv(output_dir / "tickets.csv", tickets)
    logger.info("Exported %d extraction(s) and %d ticket(s) to %s", len(results), len(tickets), output_dir)


def _cmd_config(args: argparse.Namespace) -> None:
    print(_config_path(args))


def _cmd_logout(args: argparse.Namespace) -> None:
    path = _config_path(args)
    cookies = path.parent / COOKIES_FILE_NAME
    CookieStore(path=cookies, session=SessionManager()).clear()
    logger.info("Removed saved session %s", cookies)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="loto-cli", description="Romanian lottery results and ticket history")
    p.add_argument("--config", type=str, default=None, help="Config file (JSON or YAML)")
    p.add_argument("--verbose", action="store_true", default=False)
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("results", help="Print latest extraction results").set_defaults(func=_cmd_results)
    sub.add_parser("tickets", help="Print ticket history").set_defaults(func=_cmd_tickets)
    sub.add_parser("stats", help="Print ticket statistics").set_defaults(func=_cmd_stats)

    exp = sub.add_parser("export", help="Export results and tickets as JSON (and CSV)")
    exp.add_argument("--output-dir", type=str, required=True)
    exp.add_argument("--csv", action="store_true", default=False)
    exp.set_defaults(func=_cmd_export)

    sub.add_parser("config", help="Print config file path").set_defaults(func=_cmd_config)
    sub.add_parser("logout", help="Forget the saved session").set_defaults(func=_cmd_logout)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        args.func(args)
    except CredentialsMissingError as exc:
        logger.error("%s. Please edit: %s", exc, _config_path(args))
        raise SystemExit(1) from exc
    except (LotoClientError, TransportError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
