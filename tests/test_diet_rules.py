# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from sprout.diet import (
    check_ingredient,
    diet_level_to_eating_style,
    eating_style_to_diet_level,
    is_allowed_for_user,
    map_ingredient_status,
    parse_menu,
    parse_restrictions,
    substitutes_for,
    tags_for_ingredient,
)


class TestCompatibility(unittest.TestCase):
    def test_diet_level_forbidden_tags(self) -> None:
        verdict = is_allowed_for_user({"dietLevel": "vegan"}, ["DAIRY"])
        self.assertFalse(verdict.allowed)
        self.assertEqual(len(verdict.reasons), 1)
        self.assertIn("DAIRY", verdict.reasons[0])

        self.assertTrue(is_allowed_for_user({"dietLevel": "vegetarian"}, ["DAIRY"]).allowed)
        self.assertTrue(is_allowed_for_user({"dietLevel": "flexitarian"}, ["MEAT"]).allowed)
        self.assertFalse(is_allowed_for_user({"dietLevel": "pescatarian"}, ["POULTRY"]).allowed)
        self.assertTrue(is_allowed_for_user({"dietLevel": "pescatarian"}, ["FISH"]).allowed)

    def test_custom_tags_and_allergies_are_case_insensitive(self) -> None:
        user = {"dietLevel": "flexitarian", "extraForbiddenTags": ["Peanuts"], "allergies": ["sesame"]}
        self.assertFalse(is_allowed_for_user(user, ["peanuts"]).allowed)
        self.assertFalse(is_allowed_for_user(user, ["SESAME"]).allowed)
        self.assertTrue(is_allowed_for_user(user, ["rice"]).allowed)

    def test_every_violated_rule_gives_a_reason(self) -> None:
        user = {"dietLevel": "vegan", "extraForbiddenTags": ["dairy"], "allergies": ["dairy"]}
        verdict = is_allowed_for_user(user, ["dairy"])
        self.assertFalse(verdict.allowed)
        self.assertEqual(len(verdict.reasons), 3)

    def test_result_unpacks_as_allowed_and_reasons(self) -> None:
        allowed, reasons = is_allowed_for_user({"dietLevel": "vegan"}, ["EGG"])
        self.assertFalse(allowed)
        self.assertEqual(reasons, ["EGG is forbidden for VEGAN"])

        allowed, reasons = is_allowed_for_user({"dietLevel": "vegan"}, ["rice"])
        self.assertTrue(allowed)
        self.assertEqual(reasons, [])

    def test_missing_diet_level_defaults_to_flexitarian(self) -> None:
        self.assertTrue(is_allowed_for_user({}, ["MEAT"]).allowed)


class TestIngredients(unittest.TestCase):
    def test_tags_include_keyword_tag_and_name(self) -> None:
        self.assertEqual(tags_for_ingredient("unsalted butter"), ["DAIRY", "UNSALTED BUTTER"])
        self.assertEqual(tags_for_ingredient("rice"), ["RICE"])

    def test_longest_keyword_wins(self) -> None:
        self.assertEqual(substitutes_for("chicken stock", "vegan"), ["vegetable stock"])

    def test_substitutes_only_when_forbidden(self) -> None:
        self.assertIn("vegan butter", substitutes_for("butter", "vegan"))
        self.assertEqual(substitutes_for("butter", "vegetarian"), [])
        self.assertEqual(substitutes_for("rice", "vegan"), [])

    def test_check_ingredient(self) -> None:
        verdict, subs = check_ingredient({"dietLevel": "vegan"}, "Eggs")
        self.assertFalse(verdict.allowed)
        self.assertIn("flax egg", subs)

        verdict, subs = check_ingredient({"dietLevel": "vegan"}, "spinach")
        self.assertTrue(verdict.allowed)
        self.assertEqual(subs, [])


class TestEatingStyles(unittest.TestCase):
    def test_labels_round_trip(self) -> None:
        for label in ("Vegan", "Vegetarian", "Pescatarian", "Lacto-ovo vegetarian", "Flexitarian"):
            self.assertEqual(diet_level_to_eating_style(eating_style_to_diet_level(label)), label)

    def test_levels_and_unknown_values(self) -> None:
        self.assertEqual(eating_style_to_diet_level("Lacto-ovo vegetarian"), "lacto_ovo")
        self.assertEqual(eating_style_to_diet_level("lacto-ovo"), "lacto_ovo")
        self.assertEqual(eating_style_to_diet_level("VEGAN"), "vegan")
        self.assertEqual(eating_style_to_diet_level("carnivore"), "flexitarian")
        self.assertEqual(eating_style_to_diet_level(None), "flexitarian")
        self.assertEqual(diet_level_to_eating_style("nonsense"), "Flexitarian")


class TestTextParsers(unittest.TestCase):
    def test_map_ingredient_status(self) -> None:
        self.assertEqual(map_ingredient_status("Not Allowed"), "not_allowed")
        self.assertEqual(map_ingredient_status("NotAllowed"), "not_allowed")
        self.assertEqual(map_ingredient_status("Ambiguous"), "ambiguous")
        self.assertEqual(map_ingredient_status("Allowed"), "allowed")
        self.assertEqual(map_ingredient_status(None), "allowed")

    def test_parse_menu_skips_malformed_lines(self) -> None:
        text = "Pasta Alfredo: cream, garlic, pasta\nno colon here\n: orphan\nSalad: lettuce, , tomato\n"
        self.assertEqual(parse_menu(text), [
            {"name": "Pasta Alfredo", "ingredients": ["cream", "garlic", "pasta"]},
            {"name": "Salad", "ingredients": ["lettuce", "tomato"]},
        ])
        self.assertEqual(parse_menu(""), [])
        self.assertEqual(parse_menu(None), [])

    def test_parse_restrictions(self) -> None:
        self.assertEqual(parse_restrictions("No dairy or sesame please, and avoid Gluten"), ["gluten", "dairy", "sesame"])
        self.assertEqual(parse_restrictions("anything goes"), [])


if __name__ == "__main__":
    unittest.main()
