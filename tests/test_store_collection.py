# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import shutil
import tempfile
import threading
import time
import unittest
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List

from pydantic import ValidationError

from sprout.impact.service import add_xp
from sprout.store import GroceryItemStorage, JsonFileBackend, Store, UserImpactStorage


class _SlowBackend(JsonFileBackend):
    """Widens the window between reading and rewriting a collection."""

    def store(self, collection, documents):
        time.sleep(0.05)
        super().store(collection, documents)


class _StepClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="sprout-store-"))
        self.root = self._tmp / "data"
        self.store = Store.open(self.root)

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def read_file(self, name: str) -> List[dict]:
        return json.loads((self.root / f"{name}.json").read_text(encoding="utf-8"))

    def write_file(self, name: str, docs: List[dict]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / f"{name}.json").write_text(json.dumps(docs), encoding="utf-8")


class TestCollectionReadsAndCreates(StoreTestCase):
    def test_create_round_trip(self) -> None:
        created = self.store.recipes.create({"userId": "u1", "title": "Lentil soup", "tags": ["soup"]})

        self.assertEqual(created["_id"], created["id"])
        self.assertTrue(created["createdAt"].endswith("Z"))
        self.assertEqual(self.store.recipes.find_by_id(created["id"]), created)
        # What create returns is exactly what was persisted.
        self.assertEqual(self.read_file("recipes"), [created])

    def test_create_rejects_caller_identifiers(self) -> None:
        with self.assertRaises(ValueError):
            self.store.grocery_items.create({"_id": "mine", "userId": "u1", "name": "A"})

    def test_owner_reference_is_stored_as_string(self) -> None:
        owner = uuid.uuid4()
        item = self.store.grocery_items.create({"userId": owner, "name": "Tofu"})
        self.assertEqual(item["userId"], str(owner))
        self.assertEqual(self.store.grocery_items.find_one({"userId": owner})["id"], item["id"])

    def test_create_validates_fields(self) -> None:
        invalid = [
            (self.store.users, {"name": "A", "dietLevel": "keto"}),
            (self.store.users, {"name": "A", "role": "admin"}),
            (self.store.impacts, {"user_id": "u1", "xp": -5}),
            (self.store.impacts, {"user_id": "u1", "forest_stage": "TREE"}),
            (self.store.grocery_items, {"userId": "u1", "name": "A", "isChecked": None}),
        ]
        for collection, fields in invalid:
            with self.assertRaises(ValidationError):
                collection.create(fields)

        self.assertEqual(self.store.users.count_documents(), 0)
        self.assertEqual(self.store.impacts.count_documents(), 0)
        self.assertEqual(self.store.grocery_items.count_documents(), 0)

    def test_created_records_save_back_unchanged(self) -> None:
        created = [
            self.store.users.create({"name": "A", "dietLevel": "lacto_ovo", "sproutName": "Bud"}),
            self.store.impacts.create({"user_id": "u1", "xp": 60, "forest_stage": "SPROUT"}),
            self.store.recipes.create({
                "userId": "u1",
                "title": "Soup",
                "ingredients": [{"name": "lentils", "amount": "1", "unit": "cup"}],
                "type": "veganized",
            }),
        ]
        for collection, doc in zip((self.store.users, self.store.impacts, self.store.recipes), created):
            saved = collection.save(collection.find_by_id(doc["id"]))
            saved.pop("updatedAt", None)
            doc.pop("updatedAt", None)
            self.assertEqual(saved, doc)
            self.assertEqual(collection.count_documents(), 1)

    def test_absence_is_not_an_error(self) -> None:
        self.assertIsNone(self.store.users.find_by_id("nonexistent"))
        self.assertIsNone(self.store.users.find_one({"name": "nobody"}))
        self.assertEqual(self.store.users.find({"name": "nobody"}), [])

    def test_update_of_missing_record_leaves_storage_untouched(self) -> None:
        self.store.grocery_items.create({"userId": "u1", "name": "A"})
        before = self.read_file("groceryItems")

        self.assertIsNone(self.store.grocery_items.find_by_id_and_update("nonexistent", {"isChecked": True}))
        self.assertEqual(self.read_file("groceryItems"), before)

    def test_filter_conjunction(self) -> None:
        rows = [
            ("u1", "Produce"),
            ("u1", "Dairy"),
            ("u2", "Produce"),
            ("u1", "Produce"),
            ("u2", "Dairy"),
            ("u3", "Produce"),
        ]
        created = [
            self.store.grocery_items.create({"userId": u, "name": f"item{i}", "category": c})
            for i, (u, c) in enumerate(rows)
        ]

        found = self.store.grocery_items.find({"userId": "u1", "category": "Produce"})

        self.assertEqual([d["id"] for d in found], [created[0]["id"], created[3]["id"]])
        self.assertEqual(len(self.store.grocery_items.find({})), 6)
        self.assertEqual(self.store.grocery_items.count_documents({"category": "Dairy"}), 2)

    def test_unknown_filter_field_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.store.grocery_items.find({"colour": "green"})

    def test_identifier_dual_form(self) -> None:
        self.write_file("userImpact", [
            {"_id": 7, "id": 7, "user_id": 42, "xp": 0},
            {"_id": "8", "id": "8", "user_id": "43", "xp": 5},
        ])

        self.assertEqual(self.store.impacts.find_one({"user_id": "42"})["_id"], 7)
        self.assertEqual(self.store.impacts.find_one({"user_id": 43})["_id"], "8")
        self.assertEqual(self.store.impacts.find_by_id("7")["user_id"], 42)
        self.assertEqual(self.store.impacts.find_by_id(8)["user_id"], "43")

    def test_find_by_id_falls_back_to_alias(self) -> None:
        self.write_file("users", [{"id": "legacy", "name": "Old"}])
        self.assertEqual(self.store.users.find_by_id("legacy")["name"], "Old")

    def test_returned_documents_are_copies(self) -> None:
        item = self.store.grocery_items.create({"userId": "u1", "name": "A"})
        item["name"] = "changed"
        fetched = self.store.grocery_items.find_by_id(item["id"])
        fetched["category"] = "changed"

        self.assertEqual(self.store.grocery_items.find_by_id(item["id"])["name"], "A")
        self.assertEqual(self.store.grocery_items.find_by_id(item["id"])["category"], "Uncategorized")

    def test_injected_clock_stamps_timestamps(self) -> None:
        clock = _StepClock(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        store = Store.open(self.root, clock=clock)

        item = store.grocery_items.create({"userId": "u1", "name": "A"})
        self.assertEqual(item["createdAt"], "2024-01-02T03:04:05Z")
        self.assertEqual(item["updatedAt"], "2024-01-02T03:04:05Z")

        updated = store.grocery_items.find_by_id_and_update(item["id"], {"isChecked": True})
        self.assertEqual(updated["createdAt"], "2024-01-02T03:04:05Z")
        self.assertEqual(updated["updatedAt"], "2024-01-02T03:04:06Z")


class TestCollectionUpdates(StoreTestCase):
    def test_grocery_item_end_to_end(self) -> None:
        item = self.store.grocery_items.create({"userId": "u1", "name": "A"})

        on_disk = self.read_file("groceryItems")
        self.assertEqual(len(on_disk), 1)
        self.assertEqual(on_disk[0]["name"], "A")
        self.assertEqual(on_disk[0]["category"], "Uncategorized")
        self.assertIs(on_disk[0]["isChecked"], False)

        updated = self.store.grocery_items.find_by_id_and_update(item["id"], {"isChecked": True})
        self.assertEqual(updated["name"], "A")
        self.assertEqual(updated["category"], "Uncategorized")
        self.assertIs(updated["isChecked"], True)
        self.assertEqual(self.read_file("groceryItems")[0]["isChecked"], True)

    def test_update_is_idempotent(self) -> None:
        recipe = self.store.recipes.create({"userId": "u1", "title": "Soup"})
        once = self.store.recipes.find_by_id_and_update(recipe["id"], {"title": "Stew", "tags": ["warm"]})
        twice = self.store.recipes.find_by_id_and_update(recipe["id"], {"title": "Stew", "tags": ["warm"]})

        once.pop("updatedAt")
        twice.pop("updatedAt")
        self.assertEqual(once, twice)

    def test_patch_rejects_unknown_and_invalid_fields(self) -> None:
        item = self.store.grocery_items.create({"userId": "u1", "name": "A"})
        with self.assertRaises(ValidationError):
            self.store.grocery_items.find_by_id_and_update(item["id"], {"price": 3})
        with self.assertRaises(ValidationError):
            self.store.grocery_items.find_by_id_and_update(item["id"], {"name": ""})
        with self.assertRaises(ValueError):
            self.store.grocery_items.find_by_id_and_update(item["id"], {"id": "other"})

    def test_patch_rejects_null_for_required_fields(self) -> None:
        item = self.store.grocery_items.create({"userId": "u1", "name": "A"})
        for patch in ({"isChecked": None}, {"category": None}, {"name": None}):
            with self.assertRaises(ValidationError):
                self.store.grocery_items.find_by_id_and_update(item["id"], patch)

        self.assertEqual(self.read_file("groceryItems"), [item])
        self.assertEqual(self.store.grocery_items.find({"isChecked": False}), [item])

    def test_nullable_fields_can_be_cleared(self) -> None:
        recipe = self.store.recipes.create({"userId": "u1", "title": "Soup", "substitutionMap": {"milk": "oat milk"}})
        cleared = self.store.recipes.find_by_id_and_update(recipe["id"], {"substitutionMap": None})
        self.assertIsNone(cleared["substitutionMap"])

        impact = self.store.impacts.create({"user_id": "u1", "last_activity_date": "2024-01-02"})
        reset = self.store.impacts.find_by_id_and_update(impact["id"], {"last_activity_date": None})
        self.assertIsNone(reset["last_activity_date"])

    def test_impact_xp_updates_accumulate(self) -> None:
        self.store.impacts.create({"user_id": "u1", "xp": 0})

        stages = []
        for _ in range(3):
            impact = add_xp(self.store, "u1", 10)
            stages.append(impact["forest_stage"])

        self.assertEqual(self.store.impacts.find_one({"user_id": "u1"})["xp"], 30)
        self.assertEqual(stages, ["SEED", "SEED", "SEED"])
        self.assertEqual(self.store.impacts.count_documents(), 1)

    def test_save_merges_by_owner(self) -> None:
        first = self.store.impacts.save({"user_id": "u1", "xp": 20})
        second = self.store.impacts.save({"user_id": "u1", "coins": 3})

        self.assertEqual(first["id"], second["id"])
        self.assertEqual(second["xp"], 20)
        self.assertEqual(second["coins"], 3)
        self.assertEqual(self.store.impacts.count_documents(), 1)

    def test_save_merges_by_id_and_appends_new(self) -> None:
        recipe = self.store.recipes.create({"userId": "u1", "title": "Soup"})
        saved = self.store.recipes.save({"id": recipe["id"], "title": "Stew"})
        self.assertEqual(saved["title"], "Stew")
        self.assertEqual(saved["createdAt"], recipe["createdAt"])

        fresh = self.store.recipes.save({"title": "Curry", "userId": "u2"})
        self.assertEqual(fresh["_id"], fresh["id"])
        self.assertEqual(fresh["type"], "simplified")
        self.assertEqual(self.store.recipes.count_documents(), 2)

    def test_find_one_or_create(self) -> None:
        impact, created = self.store.impacts.find_one_or_create({"user_id": "u1"})
        again, created_again = self.store.impacts.find_one_or_create({"user_id": "u1"})

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(impact["id"], again["id"])
        self.assertEqual(impact["forest_stage"], "SEED")
        self.assertIsNone(impact["last_activity_date"])

    def test_find_by_id_and_delete(self) -> None:
        keep = self.store.grocery_items.create({"userId": "u1", "name": "keep"})
        drop = self.store.grocery_items.create({"userId": "u1", "name": "drop"})

        removed = self.store.grocery_items.find_by_id_and_delete(drop["id"])
        self.assertEqual(removed["name"], "drop")
        self.assertIsNone(self.store.grocery_items.find_by_id_and_delete(drop["id"]))
        self.assertEqual([d["id"] for d in self.read_file("groceryItems")], [keep["id"]])


class TestConcurrentWriters(StoreTestCase):
    def test_concurrent_updates_to_different_documents_are_both_kept(self) -> None:
        a = self.store.grocery_items.create({"userId": "u1", "name": "A"})
        b = self.store.grocery_items.create({"userId": "u1", "name": "B"})
        slow = GroceryItemStorage(_SlowBackend(self.root))

        errors: List[BaseException] = []

        def check(doc_id: str) -> None:
            try:
                slow.find_by_id_and_update(doc_id, {"isChecked": True})
            except BaseException as exc:  # noqa: BLE001 (surface thread failures)
                errors.append(exc)

        threads = [threading.Thread(target=check, args=(d["id"],)) for d in (a, b)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        final = {d["name"]: d["isChecked"] for d in self.read_file("groceryItems")}
        self.assertEqual(final, {"A": True, "B": True})

    def test_concurrent_find_one_or_create_yields_one_record(self) -> None:
        slow_impacts = UserImpactStorage(_SlowBackend(self.root))

        def ensure() -> None:
            slow_impacts.find_one_or_create({"user_id": "u1"})

        threads = [threading.Thread(target=ensure) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(self.read_file("userImpact")), 1)


if __name__ == "__main__":
    unittest.main()
