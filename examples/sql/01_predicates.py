"""Predicate examples: comparisons, IN lists, nesting, groups and binding modes."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_query").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_query import PredicateBuilder, SpecialValueRegistry


def main() -> None:
    # Simple AND chain; the first condition has no leading combinator.
    where = PredicateBuilder().add_and("lang_id", 1).add_and("section_id", 4)
    print("Chain:", where.build_where())

    # Same field + comparator replaces the earlier value instead of duplicating.
    where.add_and("lang_id", 2)
    print("Merged:", where.build())

    # Alias substitution and SQL function wrapping.
    dated = PredicateBuilder().add_and(
        "created_at", "2024-01-01", ">=", "DATE_FORMAT(?, '%Y-%m-%d')"
    )
    print("Aliased:", dated.build_where("n"))

    # IN lists; an empty list renders FALSE.
    rubrics = PredicateBuilder().add_in("rubric_id", [1, 2, 3]).add_not_in("id", [], "AND")
    print("IN lists:", rubrics.build())

    # Nest the most recent condition: active = ? AND (name = ? OR name = ?).
    names = PredicateBuilder().add_or([("name", "Senya"), ("name", "Vasya")])
    nested = PredicateBuilder().add_and("active", 1).add_and(names)
    print("Nested:", nested.build_where())

    # Whole-builder groups nest to any depth.
    inner = PredicateBuilder().add_and("role", "admin").add_or("role", "owner")
    grouped = PredicateBuilder().add_and("active", 1).add_and_group(inner)
    print("Grouped:", grouped.build_where())

    # Set membership over comma-separated columns.
    flags = PredicateBuilder().add_set_membership("top,!hidden", "options")
    print("Set membership:", flags.build_where())

    # Named binding keeps keys unique inside one statement.
    ages = PredicateBuilder("named").add_and("age", 18, ">=").add_and("age", 65, "<")
    print("Named:", ages.build_where())

    # Literal binding inlines quoted values and returns no parameters.
    literal = PredicateBuilder("literal").add_and("name", "O'Neil").add_and("deleted_at", "NULL", "IS")
    print("Literal:", literal.build_where())

    # Extend the special words for one builder.
    registry = SpecialValueRegistry().register("CURDATE()")
    today = PredicateBuilder(special_values=registry).add_and("published_on", "CURDATE()", "<=")
    print("Custom special word:", today.build_where())


if __name__ == "__main__":
    main()
