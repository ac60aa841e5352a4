"""TableRank database management CLI.

Provides commands to create and drop the database schema, and to rebuild
establishment rating aggregates from their reviews.

Usage:
    python src/manage.py setup-db            # Create all tables
    python src/manage.py drop-db             # Drop all tables
    python src/manage.py recompute-ratings   # Rebuild mean_rating/review_count
    python src/manage.py --env production setup-db
"""

import argparse
import os
import sys


def _init_domain():
    from dining.domain import dining

    print("Initializing dining domain...")
    dining.init()
    return dining


def setup_database():
    """Create the database schema."""
    from dining.utils.db import setup_db

    dining = _init_domain()
    print("Creating dining database schema...")
    setup_db(dining)
    print("  dining schema ready.")

    print("Done.")


def drop_database():
    """Drop the database schema."""
    from dining.utils.db import drop_db

    dining = _init_domain()
    print("Dropping dining database schema...")
    drop_db(dining)
    print("  dining schema dropped.")

    print("Done.")


def recompute_ratings(establishment_id=None):
    """Recompute rating aggregates, for one establishment or all of them."""
    from dining.review.aggregation import RecomputeRatings
    from dining.utils.transactions import process

    dining = _init_domain()
    print("Recomputing establishment ratings...")
    with dining.domain_context():
        refreshed = process(RecomputeRatings(establishment_id=establishment_id))
    print(f"  {refreshed} establishment(s) refreshed.")

    print("Done.")
    return refreshed


def main(argv=None):
    parser = argparse.ArgumentParser(description="TableRank database management")
    parser.add_argument(
        "--env",
        choices=["development", "test", "production"],
        help="Configuration overlay to use (default: PROTEAN_ENV)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    recompute = subparsers.add_parser("recompute-ratings", help="Rebuild establishment rating aggregates")
    recompute.add_argument("--establishment", help="Only this establishment")

    args = parser.parse_args(argv)

    # The overlay is read when the domain module loads its config
    if args.env:
        os.environ["PROTEAN_ENV"] = args.env

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "recompute-ratings":
        recompute_ratings(args.establishment)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
