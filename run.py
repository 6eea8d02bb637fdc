#!/usr/bin/env python3
"""
Guild User Export — Entry Point.

Exports identity-provider users to a timestamped CSV file. It reads
configuration from a .env file, runs the export pipeline and writes
dumps/<timestamp>_<label>_users.csv.

The export pipeline (managed by ExportOrchestrator) performs 6 steps:
  1. Authenticate with the Auth0 Management API (client credentials)
  2. Page through the users matching the selected user type
  3. Resolve role names for the role ids found on those users
  4. Resolve academic partner names via the partner GraphQL service
  5. Flatten each user onto the CSV fieldset
  6. Write the CSV file

Usage:
    python run.py                   # Export guild and academic partner users
    python run.py guild             # Export guild users only
    python run.py ap                # Export academic partner users only
    python run.py --role rol_abc    # Export every user in one role
    python run.py --debug           # Verbose output
    python run.py --env /path       # Use alternate .env file
"""

import sys
import logging
import argparse

from config import USER_TYPES
from core import ExportOrchestrator

VERSION = "1.2.0"


def main(argv=None):
    """Parse CLI arguments and run the export pipeline."""
    parser = argparse.ArgumentParser(
        description="Guild User Export - Export identity-provider users to CSV"
    )
    parser.add_argument(
        "user_type",
        nargs="?",
        choices=USER_TYPES,
        help="User type to export (omit to export all types)",
    )
    parser.add_argument("--role", "-r", help="Export the users assigned to this role id")
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")

    args = parser.parse_args(argv)

    if args.version:
        print(f"guild-user-export {VERSION}")
        sys.exit(0)

    if args.role and args.user_type:
        parser.error("--role cannot be combined with a user type")

    # Enable HTTP-level debug logging if --debug flag is set
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s'
        )
        logging.getLogger('urllib3').setLevel(logging.DEBUG)

    orchestrator = ExportOrchestrator(env_file=args.env)

    if args.debug:
        orchestrator.debug = True

    print(f"\n{'='*60}")
    print(f"GUILD USER EXPORT v{VERSION}")
    print("="*60)
    print(f"Domain: {orchestrator.domain}")
    print(f"Export: {f'role {args.role}' if args.role else (args.user_type or 'all user types')}")

    if not orchestrator.validate_config(args.user_type, args.role):
        sys.exit(1)

    if orchestrator.output_manager.retention_days > 0:
        deleted = orchestrator.output_manager.cleanup_old_exports(orchestrator.debug)
        if deleted > 0:
            print(f"Cleaned up {deleted} old export(s)")

    results = orchestrator.run(user_type=args.user_type, role_id=args.role)

    orchestrator.print_summary(results)

    if not results.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
