# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest
from unittest import mock

from sprout.llm import client
from sprout.llm.parsing import (
    iter_json_candidates,
    parse_json_array,
    parse_json_object,
    parse_line_list,
    remove_trailing_commas,
)


class TestParsing(unittest.TestCase):
    def test_fenced_array_with_trailing_commas(self) -> None:
        content = '```json\n[{"title": "Soup", "tags": ["warm",],},]\n```'
        self.assertEqual(parse_json_array(content), [{"title": "Soup", "tags": ["warm"]}])

    def test_array_inside_prose(self) -> None:
        content = 'Sure! Here you go:\n[{"name": "Tofu scramble"}]\nEnjoy.'
        self.assertEqual(parse_json_array(content), [{"name": "Tofu scramble"}])

    def test_object_with_single_list_is_unwrapped(self) -> None:
        content = '{"recipes": [{"title": "A"}, {"title": "B"}]}'
        self.assertEqual([r["title"] for r in parse_json_array(content)], ["A", "B"])

    def test_python_literal_object(self) -> None:
        self.assertEqual(parse_json_object("{'ok': True, 'value': None}"), {"ok": True, "value": None})

    def test_unparseable_raises_value_error(self) -> None:
        with self.assertRaises(ValueError):
            parse_json_array("no json here")
        with self.assertRaises(ValueError):
            parse_json_object("[1, 2]")

    def test_trailing_commas_inside_strings_survive(self) -> None:
        self.assertEqual(remove_trailing_commas('{"a": "x,}",}'), '{"a": "x,}"}')

    def test_candidates_skip_quoted_brackets(self) -> None:
        content = 'First {"a": "}{"} then {"b": {"c": 1}} and [1, 2]'
        self.assertEqual(iter_json_candidates(content), ['{"a": "}{"}', '{"b": {"c": 1}}'])
        self.assertEqual(iter_json_candidates(content, "["), ["[1, 2]"])

    def test_line_list_strips_bullets_and_numbering(self) -> None:
        content = "1. tomato\n- olive oil\n* salt\n\n•  garlic\n2) basil"
        self.assertEqual(parse_line_list(content), ["tomato", "olive oil", "salt", "garlic", "basil"])


class TestClientHelpers(unittest.TestCase):
    def test_extract_message_text(self) -> None:
        data = {"choices": [{"message": {"content": [{"type": "text", "text": "a"}, {"type": "text", "text": "b"}]}}]}
        self.assertEqual(client.extract_message_text(data), "ab")
        self.assertEqual(client.extract_message_text({"choices": []}), "")
        self.assertEqual(client.extract_message_text(None), "")

    def test_completions_url(self) -> None:
        self.assertEqual(client.completions_url("https://x/v1/"), "https://x/v1/chat/completions")
        self.assertEqual(client.completions_url("https://x/v1/chat/completions"), "https://x/v1/chat/completions")

    def test_missing_api_key_raises(self) -> None:
        with mock.patch.object(client.settings, "llm_api_key", None):
            with self.assertRaises(client.LLMError):
                client.generate("hello")

    def test_generate_recipes_degrades_on_garbage(self) -> None:
        with mock.patch.object(client, "generate", return_value="I cannot help with that."):
            with self.assertLogs("sprout.llm.client", level="WARNING"):
                self.assertEqual(client.generate_recipes(["tofu"]), [])

    def test_generate_recipes_normalizes(self) -> None:
        raw = (
            '[{"name": "Tofu bowl", "time": "20 min", '
            '"ingredients": ["tofu", {"ingredient": "rice", "quantity": "1", "unit": "cup"}], '
            '"instructions": "Cook rice."}]'
        )
        with mock.patch.object(client, "generate", return_value=raw):
            recipes = client.generate_recipes(["tofu", "rice"], count=3)

        self.assertEqual(len(recipes), 1)
        recipe = recipes[0]
        self.assertEqual(recipe["title"], "Tofu bowl")
        self.assertEqual(recipe["duration"], "20 min")
        self.assertEqual(recipe["ingredients"], [
            {"name": "tofu", "amount": "", "unit": ""},
            {"name": "rice", "amount": "1", "unit": "cup"},
        ])
        self.assertEqual(recipe["steps"], ["Cook rice."])

    def test_classify_ingredients_shapes_rows(self) -> None:
        raw = '[{"ingredient": "milk", "allowed": "NotAllowed", "reason": "dairy", "suggestions": "oat milk"}, {"nope": 1}]'
        with mock.patch.object(client, "generate", return_value=raw):
            rows = client.classify_ingredients({"dietLevel": "vegan"}, ["milk"])
        self.assertEqual(rows, [{"ingredient": "milk", "allowed": "NotAllowed", "reason": "dairy", "suggestions": ["oat milk"]}])


if __name__ == "__main__":
    unittest.main()
