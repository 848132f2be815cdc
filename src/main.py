"""
1) Parse the family tree data in a GEDCOM file into Person and Union records.
2) Store the records with SQLite, then load them back as one snapshot.
3) Validate the family tree data for cycles, impossible ages, and date ordering.
4) Build the three-generation tree around a focal person and plot it.
5) Write descendant reports for each parentless ancestor, or for one chosen person.
"""

from pathlib import Path
import argparse
import logging
import sys

from database import create_database, load_members, load_unions, store_data
from graph import build_graph, select_default_focal
from hierarchy import build_deep_hierarchy, build_hierarchy, find_ancestors
from models import Person, Union
from parsing import normalize_data, parse_gedcom
from plotting import plot_hierarchy
from report import render_report, render_text_report
from validation import validate_graph

PROJECT_ROOT = Path(__file__).parent.parent


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build family tree diagrams and reports.")
    parser.add_argument("--gedcom", type=Path, default=PROJECT_ROOT / "family.ged")
    parser.add_argument("--db", type=Path, default=PROJECT_ROOT / "family_tree.db")
    parser.add_argument("--focal", help="Person id to center the tree on")
    parser.add_argument(
        "--descendants-of",
        metavar="ID",
        help="Report only this person's descendants instead of every parentless ancestor's",
    )
    parser.add_argument("--plot", type=Path, default=PROJECT_ROOT / "family_tree.png")
    parser.add_argument("--report", type=Path, default=PROJECT_ROOT / "family_report.html")
    parser.add_argument("--text-report", type=Path, default=PROJECT_ROOT / "family_report_text.html")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def select_report_roots(
    members: list[Person], unions: list[Union], descendants_of: str | None = None
) -> list[Person]:
    """
    People whose descendants go in the reports: the one requested person, or
    else every parentless ancestor.

    Raises ValueError if descendants_of is not among members.
    """
    if descendants_of is None:
        return find_ancestors(members, unions)

    for m in members:
        if m.id == descendants_of:
            return [m]
    raise ValueError(f"Person ID {descendants_of} not found")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Delete existing database to ensure fresh start
    if args.db.exists():
        args.db.unlink()
        print(f"Deleted existing database: {args.db}")

    print(f"Parsing GEDCOM file: {args.gedcom}")
    reader = parse_gedcom(args.gedcom)
    persons, unions = normalize_data(reader)
    print(f"  Found {len(persons)} persons and {len(unions)} unions")

    print(f"Storing data in SQLite: {args.db}")
    conn = create_database(args.db)
    try:
        store_data(conn, persons, unions)
        members = load_members(conn)
        unions = load_unions(conn)
    finally:
        conn.close()

    print("Validating graph...")
    G = build_graph(members, unions)
    warnings = validate_graph(G)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    try:
        report_people = select_report_roots(members, unions, args.descendants_of)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 1

    focal_id = args.focal or select_default_focal(G)
    tree = build_hierarchy(members, focal_id, unions)
    if tree is None:
        print(f"No tree to show for focal person {focal_id!r}", file=sys.stderr)
        return 1

    print(f"Plotting tree around {focal_id} to: {args.plot}")
    plot_hierarchy(tree, args.plot, focal_id=focal_id)

    print(f"Building reports for {len(report_people)} root(s)...")
    roots = [build_deep_hierarchy(p, members, unions) for p in report_people]

    args.report.write_text(render_report(roots), encoding="utf-8")
    args.text_report.write_text(render_text_report(roots), encoding="utf-8")
    print(f"  Reports saved to {args.report} and {args.text_report}")

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
