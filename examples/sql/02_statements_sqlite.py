"""Statement examples executed against an in-memory SQLite database."""

from __future__ import annotations

import logging
import sqlite3
import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "mini_query").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mini_query import Database, ExecutorPort, PredicateBuilder, StatementBuilder


def count_in_rubrics(executor: ExecutorPort, rubric_ids: list[int]) -> int:
    sql, params = PredicateBuilder().add_in("rubric_id", rubric_ids).build_where()
    return executor.fetch_scalar(f"SELECT COUNT(*) FROM `news`{sql}", params)


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    db = Database(lambda: sqlite3.connect(":memory:"))
    statements = StatementBuilder()

    with db:
        db.execute(
            "CREATE TABLE `news` ("
            "`id` INTEGER PRIMARY KEY AUTOINCREMENT, "
            "`title` TEXT NOT NULL, "
            "`rubric_id` INTEGER, "
            "`created_at` TEXT)"
        )

        with db.transaction():
            db.run(statements.insert("news", {"title": "Hello", "rubric_id": 1}))
            print("Inserted id:", db.last_insert_id())

            db.run(
                statements.insert(
                    "news",
                    [
                        {"title": "Second", "rubric_id": 2, "created_at": "CURRENT_TIMESTAMP"},
                        {"title": "Third", "rubric_id": 2, "created_at": "CURRENT_TIMESTAMP"},
                    ],
                )
            )

        where = PredicateBuilder().add_and("rubric_id", 2).add_and("title", "Third", "<>")
        changed = db.run(statements.update("news", {"rubric_id": 3}, where))
        print("Updated rows:", changed)

        print("Titles:", db.fetch_pairs("SELECT `id`, `title` FROM `news` ORDER BY `id`"))
        print("Count:", count_in_rubrics(db, [2, 3]))

        # SQLite has no ON DUPLICATE KEY; show the MySQL text instead.
        print("Upsert SQL:", statements.upsert("news", {"id": 1, "title": "Hello again"}))

        db.run(statements.drop_table("news"))


if __name__ == "__main__":
    main()
