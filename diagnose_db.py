"""
Diagnose and repair the catalog database structure.

Usage:
  python diagnose_db.py              validate, ask before repairing
  python diagnose_db.py --yes        validate and repair without asking
  python diagnose_db.py --no-repair  report only
  python diagnose_db.py --json       print the result as JSON
"""
import argparse
import logging
import sys
from datetime import datetime
from typing import Callable, List, Optional

from app.services.diagnostic import run_diagnostic
from descriptor.catalog import CATALOG_SCHEMA
from orchestrator.initializer import FatalInitializationError, initialize
from repair.ddl_script import load_ddl_script
from report.reporter import ReportGenerator
from utils.config import load_config

logger = logging.getLogger("diagnose_db")

YES_ANSWERS = {"s", "si", "y", "yes"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Diagnose and repair the catalog database structure")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--yes", action="store_true", help="Repair without asking")
    mode.add_argument("--no-repair", action="store_true", help="Only report problems")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--ddl", help="Path to the DDL script (default: DB_SQL_FILE or database.sql)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging verbosity (default: WARNING)",
    )
    return parser


def ask_repair(prompt: Callable[[str], str] = input) -> bool:
    try:
        answer = prompt("Attempt to repair the structure? (s/n) ")
    except EOFError:
        return False
    return answer.strip().lower() in YES_ANSWERS


def main(argv: Optional[List[str]] = None, prompt: Callable[[str], str] = input, init=initialize) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    config = load_config(ddl_path=args.ddl)
    reporter = ReportGenerator()

    try:
        init_result = init(config, CATALOG_SCHEMA, auto_repair=False)
    except FatalInitializationError as e:
        print(f"\n❌ Error during diagnostic: {e}", file=sys.stderr)
        print("\n=== DIAGNOSTIC FINISHED WITH ERRORS ===")
        return 1

    db = init_result.connection
    try:
        first = run_diagnostic(db, CATALOG_SCHEMA, "", repair=False)
        if first.valid or args.no_repair:
            result = first
        elif args.yes or ask_repair(prompt):
            try:
                ddl_script = load_ddl_script(config.ddl_path)
            except OSError as e:
                print(f"❌ Could not read DDL script {config.ddl_path}: {e}", file=sys.stderr)
                return 1
            result = run_diagnostic(db, CATALOG_SCHEMA, ddl_script, repair=True)
        else:
            print("Repair cancelled")
            result = first

        if args.json:
            print(reporter.to_json(result))
        else:
            print(reporter.render_text(result, generated_at=datetime.now().isoformat(timespec="seconds")))
        return 0
    except Exception:
        logger.exception("❌ Unexpected error during diagnostic")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
