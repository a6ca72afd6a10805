from __future__ import annotations

import unittest

from mini_query.core.binders import BindingMode
from mini_query.core.conditions import Comparison, Group, InList
from mini_query.core.errors import (
    BindingModeLocked,
    UnboundPlaceholderCountMismatch,
    UnknownBindingMode,
)
from mini_query.core.predicate_builder import PredicateBuilder
from mini_query.core.special_values import SpecialValueRegistry


class PredicateBuilderBasicsTests(unittest.TestCase):
    def test_and_conditions(self) -> None:
        where = PredicateBuilder()
        where.add_and("lang_id", 1).add_and("section_id", 1)

        sql, params = where.build()

        self.assertEqual(sql, " AND `lang_id` = ?  AND `section_id` = ? ")
        self.assertEqual(params, [1, 1])

    def test_or_and_custom_comparator(self) -> None:
        sql, params = (
            PredicateBuilder()
            .add_and("age", 18, ">=")
            .add_or("role", "admin", "<>")
            .build()
        )
        self.assertEqual(sql, " AND `age` >= ?  OR `role` <> ? ")
        self.assertEqual(params, [18, "admin"])

    def test_empty_builder(self) -> None:
        where = PredicateBuilder()
        self.assertFalse(where)
        self.assertEqual(where.build(), ("", []))
        self.assertEqual(where.build_where(), ("", []))

    def test_in_condition(self) -> None:
        sql, params = PredicateBuilder().add_in("rubric_id", [2, 6, 7]).build()
        self.assertEqual(sql, " `rubric_id` IN (?,?,?) ")
        self.assertEqual(params, [2, 6, 7])

    def test_not_in_and_set_iteration_order(self) -> None:
        values = (5, 3, 9)
        sql, params = PredicateBuilder().add_not_in("id", iter(values)).build()
        self.assertEqual(sql, " `id` NOT IN (?,?,?) ")
        self.assertEqual(params, [5, 3, 9])

    def test_empty_in_sets_render_constants(self) -> None:
        self.assertEqual(PredicateBuilder().add_in("id", []).build(), (" FALSE ", []))
        self.assertEqual(PredicateBuilder().add_not_in("id", []).build(), (" TRUE ", []))
        self.assertEqual(
            PredicateBuilder().add_and("a", 1).add_in("id", [], combinator="and").build(),
            (" AND `a` = ?  AND FALSE ", [1]),
        )

    def test_in_with_combinator(self) -> None:
        sql, params = (
            PredicateBuilder()
            .add_and("publish", "y")
            .add_in("rubric_id", [2], combinator="AND")
            .build()
        )
        self.assertEqual(sql, " AND `publish` = ?  AND `rubric_id` IN (?) ")
        self.assertEqual(params, ["y", 2])

        with self.assertRaises(ValueError):
            PredicateBuilder().add_in("id", [1], combinator="XOR")

    def test_like(self) -> None:
        sql, params = PredicateBuilder().add_like("name", "%teach%").build()
        self.assertEqual(sql, " `name` LIKE ? ")
        self.assertEqual(params, ["%teach%"])

    def test_set_membership(self) -> None:
        sql, params = (
            PredicateBuilder().add_set_membership("hidden, !edited", "options").build()
        )
        self.assertEqual(
            sql,
            " FIND_IN_SET(?, `options`) > 0 AND !FIND_IN_SET(?, `options`) > 0 ",
        )
        self.assertEqual(params, ["hidden", "edited"])

    def test_empty_set_membership_is_noop(self) -> None:
        for tokens in ("", " , ", "!"):
            with self.subTest(tokens=tokens):
                where = PredicateBuilder().add_set_membership(tokens, "options")
                self.assertEqual(len(where), 0)
                self.assertEqual(where.build(), ("", []))

    def test_raw_fragment_is_verbatim(self) -> None:
        sql, params = (
            PredicateBuilder()
            .add_and("a", 1)
            .add_raw("AND (`dno`.date_from >= NOW() OR `dno`.time_known = 'n?')")
            .build(alias="dno")
        )
        self.assertEqual(
            sql,
            " AND `dno`.`a` = ?  AND (`dno`.date_from >= NOW() OR `dno`.time_known = 'n?') ",
        )
        self.assertEqual(params, [1])

    def test_raw_fragment_with_unbound_placeholder_fails(self) -> None:
        where = PredicateBuilder().add_raw("AND `x` = ?")
        with self.assertRaises(UnboundPlaceholderCountMismatch):
            where.build()

    def test_invalid_field_types(self) -> None:
        with self.assertRaises(TypeError):
            PredicateBuilder().add_and(123, 1)
        with self.assertRaises(TypeError):
            PredicateBuilder().add_raw(None)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            PredicateBuilder().add_and("a", 1, "")


class PredicateBuilderMergeTests(unittest.TestCase):
    def test_same_condition_updates_value(self) -> None:
        where = PredicateBuilder().add_and("x", 1).add_and("x", 2)
        self.assertEqual(where.build(), (" AND `x` = ? ", [2]))

    def test_merge_keeps_position(self) -> None:
        where = (
            PredicateBuilder()
            .add_and("a", 1)
            .add_and("b", 2)
            .add_and("a", 3)
        )
        self.assertEqual(where.build(), (" AND `a` = ?  AND `b` = ? ", [3, 2]))

    def test_different_comparator_combinator_or_function_do_not_merge(self) -> None:
        where = (
            PredicateBuilder()
            .add_and("x", 1, ">")
            .add_and("x", 9, "<")
            .add_or("x", 5)
            .add_and("x", 6)
            .add_and("x", "2024-01-01", db_function="DATE(?)")
        )
        sql, params = where.build()
        self.assertEqual(
            sql,
            " AND `x` > ?  AND `x` < ?  OR `x` = ?  AND `x` = ?  AND DATE(`x`) = ? ",
        )
        self.assertEqual(params, [1, 9, 5, 6, "2024-01-01"])

    def test_special_value_is_inlined(self) -> None:
        sql, params = PredicateBuilder().add_and("t", "NOW()").build()
        self.assertEqual(sql, " AND `t` = NOW() ")
        self.assertEqual(params, [])

    def test_special_value_is_never_merged(self) -> None:
        where = (
            PredicateBuilder()
            .add_and("t", 5)
            .add_and("t", "NOW()")
            .add_and("t", "NOW()")
            .add_and("t", 6)
        )
        sql, params = where.build()
        self.assertEqual(sql, " AND `t` = ?  AND `t` = NOW()  AND `t` = NOW() ")
        self.assertEqual(params, [6])

    def test_custom_registry(self) -> None:
        registry = SpecialValueRegistry().register("CURDATE()")
        where = PredicateBuilder(special_values=registry).add_and("d", "CURDATE()", ">=")
        self.assertTrue(where.is_special("CURDATE()"))
        self.assertEqual(where.build(), (" AND `d` >= CURDATE() ", []))
        self.assertEqual(
            PredicateBuilder().add_and("d", "CURDATE()").build(),
            (" AND `d` = ? ", ["CURDATE()"]),
        )

    def test_in_like_and_raw_are_not_merged(self) -> None:
        where = (
            PredicateBuilder()
            .add_in("id", [1])
            .add_in("id", [1])
            .add_like("n", "a%")
            .add_like("n", "a%")
        )
        self.assertEqual(len(where), 4)


class PredicateBuilderRenderingTests(unittest.TestCase):
    def test_alias_resolution(self) -> None:
        where = PredicateBuilder().add_and("a", 1).add_and("b.c", 2).add_in("d", [3])

        aliased, _ = where.build(alias="n")
        plain, _ = where.build()

        self.assertEqual(aliased, " AND `n`.`a` = ?  AND b.c = ?  `n`.`d` IN (?) ")
        self.assertEqual(aliased.count("`n`."), 2)
        self.assertEqual(plain, " AND `a` = ?  AND b.c = ?  `d` IN (?) ")
        self.assertNotIn("%alias%", plain)

    def test_db_function_wraps_field(self) -> None:
        sql, params = (
            PredicateBuilder()
            .add_and("created_at", "2024-01-01", db_function="DATE_FORMAT(?, '%Y-%m-%d')")
            .build(alias="n")
        )
        self.assertEqual(sql, " AND DATE_FORMAT(`n`.`created_at`, '%Y-%m-%d') = ? ")
        self.assertEqual(params, ["2024-01-01"])

    def test_build_where(self) -> None:
        sql, params = PredicateBuilder().add_and("a", 1).add_or("b", 2).build_where("t")
        self.assertEqual(sql, " WHERE `t`.`a` = ?  OR `t`.`b` = ? ")
        self.assertEqual(params, [1, 2])

    def test_build_can_repeat(self) -> None:
        where = PredicateBuilder().add_and("a", 1)
        self.assertEqual(where.build(), where.build())

    def test_positional_placeholder_count_matches_params(self) -> None:
        builders = [
            PredicateBuilder().add_and("a", 1).add_or("b", 2),
            PredicateBuilder().add_in("a", range(10)).add_not_in("b", [1, 2]),
            PredicateBuilder().add_set_membership("x,!y,z", "opts").add_like("n", "%?%"),
            PredicateBuilder().add_and("a", "NOW()").add_and("b", None),
            PredicateBuilder()
            .add_and("a", 1)
            .add_or_group(PredicateBuilder().add_or("b", 2).add_in("c", [3, 4])),
        ]
        for index, where in enumerate(builders):
            with self.subTest(index=index):
                sql, params = where.build()
                self.assertEqual(sql.count("?"), len(params))

    def test_reset(self) -> None:
        where = PredicateBuilder().add_and("a", 1).add_in("b", [1])
        where.reset()
        self.assertEqual(len(where), 0)
        self.assertEqual(where.build(), ("", []))
        where.clear()
        self.assertEqual(where.build(), ("", []))


class PredicateBuilderNestingTests(unittest.TestCase):
    def test_nesting_wraps_last_condition_of_same_builder(self) -> None:
        where = PredicateBuilder().add_and("publish", "y")
        where.add_and(where.add_in("rubric_id", [2, 6, 7]))

        sql, params = where.build()

        self.assertEqual(sql, " AND `publish` = ?  AND ( `rubric_id` IN (?,?,?) ) ")
        self.assertEqual(params, ["y", 2, 6, 7])

    def test_nesting_pops_from_other_builder(self) -> None:
        source = PredicateBuilder().add_or("a", 1).add_or("b", 2)
        target = PredicateBuilder().add_and("c", 3).add_and(source)

        self.assertEqual(target.build(), (" AND `c` = ?  AND ( `b` = ? ) ", [3, 2]))
        self.assertEqual(source.build(), (" OR `a` = ? ", [1]))

    def test_nesting_pairs_into_or_group(self) -> None:
        where = PredicateBuilder().add_and("active", 1)
        where.add_and(where.add_or([("name", "Senya"), ("name", "Vasya")]))

        sql, params = where.build()

        self.assertEqual(sql, " AND `active` = ?  AND ( `name` = ? OR `name` = ? ) ")
        self.assertEqual(params, [1, "Senya", "Vasya"])

    def test_pairs_without_nesting(self) -> None:
        sql, params = PredicateBuilder().add_or([("a", 1), ("b", "NULL")]).build()
        self.assertEqual(sql, " `a` = ? OR `b` = NULL ")
        self.assertEqual(params, [1])

    def test_invalid_pairs(self) -> None:
        with self.assertRaises(TypeError):
            PredicateBuilder().add_or([("a", 1, 2)])
        with self.assertRaises(TypeError):
            PredicateBuilder().add_or(["ab"])
        with self.assertRaises(ValueError):
            PredicateBuilder().add_or([])

    def test_nesting_empty_builder_fails(self) -> None:
        with self.assertRaises(IndexError):
            PredicateBuilder().add_and(PredicateBuilder())

    def test_group_keeps_every_condition(self) -> None:
        roles = PredicateBuilder().add_or("role", "admin").add_or("role", "owner")
        where = PredicateBuilder().add_and("active", 1).add_and_group(roles)

        sql, params = where.build()

        self.assertEqual(sql, " AND `active` = ?  AND ( `role` = ? OR `role` = ? ) ")
        self.assertEqual(params, [1, "admin", "owner"])
        self.assertEqual(len(roles), 2)

    def test_groups_nest_to_any_depth(self) -> None:
        leaf = PredicateBuilder().add_and("b", 2).add_and("c", 3)
        middle = PredicateBuilder().add_and("a", 1).add_or_group(leaf)
        outer = PredicateBuilder().add_and_group(middle)

        sql, params = outer.build(alias="t")

        self.assertEqual(
            sql,
            " AND ( `t`.`a` = ? OR ( `t`.`b` = ? AND `t`.`c` = ? ) ) ",
        )
        self.assertEqual(params, [1, 2, 3])
        node = outer.conditions[0]
        self.assertIsInstance(node, Group)
        self.assertIsInstance(node.items[1], Group)

    def test_group_validation(self) -> None:
        where = PredicateBuilder().add_and("a", 1)
        with self.assertRaises(ValueError):
            where.add_and_group(where)
        where.add_or_group(PredicateBuilder())
        self.assertEqual(len(where), 1)

    def test_condition_nodes(self) -> None:
        where = PredicateBuilder().add_and("a", 1).add_in("b", [1, 2])
        first, second = where.conditions
        self.assertIsInstance(first, Comparison)
        self.assertEqual(first.signature, ("AND", "%alias%`a`", "="))
        self.assertIsInstance(second, InList)
        self.assertEqual(second.values, (1, 2))


class PredicateBuilderModeTests(unittest.TestCase):
    def test_named_mode_allocates_unique_keys(self) -> None:
        where = (
            PredicateBuilder("named")
            .add_and("lang_id", 1)
            .add_and("age", 18, ">=")
            .add_and("age", 30, "<")
            .add_in("id", [4, 5], combinator="AND")
        )

        sql, params = where.build()

        self.assertEqual(
            sql,
            " AND `lang_id` = :lang_id  AND `age` >= :age  AND `age` < :age_2 "
            " AND `id` IN (:id,:id_2) ",
        )
        self.assertEqual(
            params, {"lang_id": 1, "age": 18, "age_2": 30, "id": 4, "id_2": 5}
        )

    def test_named_mode_merge(self) -> None:
        where = PredicateBuilder(BindingMode.NAMED).add_and("x", 1).add_and("x", 2)
        self.assertEqual(where.build(), (" AND `x` = :x ", {"x": 2}))

    def test_named_mode_qualified_field_key(self) -> None:
        sql, params = PredicateBuilder("named").add_and("n.title", "A").build()
        self.assertEqual(sql, " AND n.title = :n_title ")
        self.assertEqual(params, {"n_title": "A"})

    def test_named_mode_keys_are_ascii(self) -> None:
        sql, params = PredicateBuilder("named").add_and("café²", 1).build()
        self.assertEqual(sql, " AND `café²` = :caf__ ")
        self.assertEqual(params, {"caf__": 1})

    def test_literal_mode_inlines_values(self) -> None:
        sql, params = (
            PredicateBuilder("literal")
            .add_and("name", "O'Neil")
            .add_in("id", [1, 2], combinator="OR")
            .add_and("t", "NOW()")
            .build()
        )
        self.assertEqual(
            sql, " AND `name` = 'O\\'Neil'  OR `id` IN (1,2)  AND `t` = NOW() "
        )
        self.assertEqual(params, [])

    def test_mode_is_locked_after_first_condition(self) -> None:
        where = PredicateBuilder()
        where.set_mode("named")
        self.assertIs(where.mode, BindingMode.NAMED)

        where.add_and("a", 1)
        with self.assertRaises(BindingModeLocked):
            where.set_mode("positional")
        where.set_mode("named")

        where.reset()
        where.set_mode("positional")
        self.assertIs(where.mode, BindingMode.POSITIONAL)

    def test_unknown_mode(self) -> None:
        with self.assertRaises(UnknownBindingMode):
            PredicateBuilder("sometimes")
        with self.assertRaises(UnknownBindingMode):
            PredicateBuilder().set_mode("sometimes")


if __name__ == "__main__":
    unittest.main()
