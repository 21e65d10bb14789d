import importlib.util
import json
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from stampbook.config import Settings
from stampbook.models import Prize, PrizeInput
from stampbook.prizes import PrizeCollection
from stampbook.storage import FilePrizeStore, KvPrizeStore, RedisPrizeStore

SCRIPTS = Path(__file__).resolve().parents[2] / "scripts"


def _load_script(name: str):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class ImportPrizesTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.script = _load_script("import_prizes")

    def test_reads_json_and_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            json_path = Path(tmp) / "prizes.json"
            json_path.write_text(
                json.dumps([{"name": "Mug", "description": "Ceramic", "requiredStamps": 5}]),
                encoding="utf-8",
            )
            csv_path = Path(tmp) / "prizes.csv"
            csv_path.write_text(
                "name,description,requiredStamps\nPen,Blue pen,2\n", encoding="utf-8"
            )
            self.assertEqual(self.script.read_rows(json_path)[0]["name"], "Mug")
            row = self.script.read_rows(csv_path)[0]

        prize_input = self.script.to_input(row)
        self.assertEqual(prize_input.name, "Pen")
        self.assertEqual(prize_input.requiredStamps, "2")
        self.assertIsNone(prize_input.image)

    def _run(self, *argv, data_file):
        settings = Settings(_env_file=None, data_file=str(data_file))
        with patch.dict(os.environ, {}, clear=True), patch.object(
            sys, "argv", ["import_prizes.py", *argv]
        ), patch.object(self.script, "get_settings", return_value=settings):
            return self.script.main()

    def _write_rows(self, tmp, rows):
        path = Path(tmp) / "rows.json"
        path.write_text(json.dumps(rows), encoding="utf-8")
        return path

    def test_main_appends_and_skips_bad_rows(self):
        with tempfile.TemporaryDirectory() as tmp:
            data_file = Path(tmp) / "prizes.json"
            existing = PrizeCollection(FilePrizeStore(data_file)).create(
                PrizeInput(name="Pen", description="Blue pen", requiredStamps=2)
            )
            rows = self._write_rows(
                tmp,
                [
                    {"name": "Mug", "description": "Ceramic", "requiredStamps": 5},
                    "not a row",
                    ["Cap", "Blue cap", 3],
                    {"name": "Cap", "description": "Blue cap", "requiredStamps": 0},
                ],
            )
            self.assertEqual(self._run(str(rows), data_file=data_file), 0)
            stored = FilePrizeStore(data_file).load_all()

        self.assertEqual([p.name for p in stored], ["Pen", "Mug"])
        self.assertEqual(stored[0].id, existing.id)

    def test_main_dry_run_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmp:
            data_file = Path(tmp) / "prizes.json"
            rows = self._write_rows(
                tmp, [{"name": "Mug", "description": "Ceramic", "requiredStamps": 5}]
            )
            self.assertEqual(self._run(str(rows), "--dry-run", data_file=data_file), 0)
            self.assertFalse(data_file.exists())

    def test_main_replace_swaps_collection(self):
        with tempfile.TemporaryDirectory() as tmp:
            data_file = Path(tmp) / "prizes.json"
            PrizeCollection(FilePrizeStore(data_file)).create(
                PrizeInput(name="Pen", description="Blue pen", requiredStamps=2)
            )
            rows = self._write_rows(
                tmp, [{"name": "Mug", "description": "Ceramic", "requiredStamps": 5}]
            )
            self.assertEqual(self._run(str(rows), "--replace", data_file=data_file), 0)
            stored = FilePrizeStore(data_file).load_all()

        self.assertEqual([p.name for p in stored], ["Mug"])

    def test_main_replace_without_valid_rows_keeps_collection(self):
        with tempfile.TemporaryDirectory() as tmp:
            data_file = Path(tmp) / "prizes.json"
            existing = PrizeCollection(FilePrizeStore(data_file)).create(
                PrizeInput(name="Pen", description="Blue pen", requiredStamps=2)
            )
            before = data_file.read_text(encoding="utf-8")
            rows = self._write_rows(
                tmp, [{"name": "Mug", "description": "Ceramic", "requiredStamps": 0}]
            )
            self.assertEqual(self._run(str(rows), "--replace", data_file=data_file), 1)
            self.assertEqual(data_file.read_text(encoding="utf-8"), before)
            stored = FilePrizeStore(data_file).load_all()

        self.assertEqual([p.id for p in stored], [existing.id])

    def test_main_unreadable_input(self):
        with tempfile.TemporaryDirectory() as tmp:
            data_file = Path(tmp) / "prizes.json"
            missing = Path(tmp) / "missing.json"
            self.assertEqual(self._run(str(missing), data_file=data_file), 1)
            self.assertFalse(data_file.exists())


class CopyPrizesTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.script = _load_script("copy_prizes")

    def test_open_store_kinds(self):
        store = self.script.open_store("file:data/prizes.json", key="prizes", kv_token=None)
        self.assertIsInstance(store, FilePrizeStore)

        with patch("stampbook.storage.redis.Redis.from_url"):
            store = self.script.open_store(
                "redis:redis://localhost:6379/0", key="prizes", kv_token=None
            )
        self.assertIsInstance(store, RedisPrizeStore)

        store = self.script.open_store(
            "kv:https://kv.example.test", key="prizes", kv_token="secret"
        )
        self.assertIsInstance(store, KvPrizeStore)

    def test_open_store_rejects_bad_specs(self):
        for spec in ("bogus", "s3:bucket"):
            with self.assertRaises(ValueError):
                self.script.open_store(spec, key="prizes", kv_token=None)
        with self.assertRaises(ValueError):
            self.script.open_store("kv:https://kv.example.test", key="prizes", kv_token=None)

    def _run(self, *argv):
        with patch.object(sys, "argv", ["copy_prizes.py", *argv]):
            return self.script.main()

    def test_main_copies_file_to_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "source.json"
            target = Path(tmp) / "nested" / "target.json"
            prize = PrizeCollection(FilePrizeStore(source)).create(
                PrizeInput(name="Mug", description="Ceramic", requiredStamps=5)
            )
            self.assertEqual(self._run(f"file:{source}", f"file:{target}"), 0)
            copied = FilePrizeStore(target).load_all()

        self.assertEqual(copied, [prize])

    def test_main_refuses_empty_source(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "missing.json"
            target = Path(tmp) / "target.json"
            FilePrizeStore(target).save_all(
                [
                    Prize(
                        id="a",
                        name="Mug",
                        description="Ceramic",
                        image="",
                        requiredStamps=5,
                        isRedeemed=False,
                        createdAt="2025-01-01T00:00:00.000Z",
                        updatedAt="2025-01-01T00:00:00.000Z",
                    )
                ]
            )
            before = target.read_text(encoding="utf-8")
            self.assertEqual(self._run(f"file:{source}", f"file:{target}"), 1)
            self.assertEqual(target.read_text(encoding="utf-8"), before)

            self.assertEqual(
                self._run(f"file:{source}", f"file:{target}", "--allow-empty"), 0
            )
            self.assertEqual(FilePrizeStore(target).load_all(), [])


if __name__ == "__main__":
    unittest.main()
