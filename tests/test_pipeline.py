import json
import unittest
from datetime import datetime, timedelta, timezone

from gamepulse.config import Config
from gamepulse.contracts.content_idea import Priority
from gamepulse.errors import EmptyResultError, ModelDecodeError, PersistenceError
from gamepulse.pipeline.orchestrator import ContentIdeaPipeline


NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)

COLUMNS = {"Juego": "title", "Fecha": "date", "Categoría": "select", "Score viral": "number", "Prioridad": "select"}


class FakeModel:
    def __init__(self, response):
        self.response = response
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.response


class FakeRepo:
    def __init__(self, history=(), fail_on=None):
        self.history = list(history)
        self.fail_on = fail_on
        self.inserted = []

    def columns(self):
        return dict(COLUMNS)

    def recent_names(self, limit=60, *, columns=None):
        return self.history[:limit]

    def insert(self, properties):
        name = properties["Juego"]["title"][0]["text"]["content"]
        if name == self.fail_on:
            raise PersistenceError("validation_error", status=400)
        self.inserted.append(properties)
        return f"page-{len(self.inserted)}"


def _config(**overrides):
    config = Config(openai_api_key="sk", notion_api_key="secret", notion_database_id="a" * 32)
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


def _item(title, hours_ago, link):
    return {"title": title, "link": link, "published": (NOW - timedelta(hours=hours_ago)).isoformat()}


def _ideas_json(*names, **extra):
    return json.dumps({"ideas": [dict({"juego": n, "categoria": "Anuncio", "score_viral": 8}, **extra) for n in names]})


def _pipeline(config, model, repo, feeds=None):
    return ContentIdeaPipeline(config, model=model, repo=repo, feed_loader=lambda: list(feeds or []), clock=lambda: NOW)


class TestPipeline(unittest.TestCase):
    def test_rss_run_writes_on_topic_ideas(self):
        feeds = [
            ("IGN", [
                _item("Starfall Online MMO announced", 3, "https://ign.com/a"),
                _item("Best monitors for gaming", 2, "https://ign.com/b"),
                _item("Open beta for Ruinas", 5, "https://ign.com/c"),
            ]),
            ("Vandal", [
                _item("Nuevo tráiler de Hollow Tide", 10, "https://vandal.es/a"),
                _item("Guía de compras", 1, "https://vandal.es/b"),
            ]),
        ]
        model = FakeModel(_ideas_json("Starfall Online", "Ruinas", "Hollow Tide"))
        repo = FakeRepo()
        result = _pipeline(_config(), model, repo, feeds).run()

        self.assertEqual(result.status, "done")
        self.assertEqual(len(result.entries), 3)
        prompt = model.prompts[0]
        self.assertIn("Starfall Online MMO announced", prompt)
        self.assertNotIn("Best monitors", prompt)
        self.assertNotIn("Guía de compras", prompt)
        self.assertEqual(result.written, 3)
        self.assertEqual(result.page_ids, ["page-1", "page-2", "page-3"])
        self.assertEqual(repo.inserted[0]["Fecha"], {"date": {"start": "2026-10-19"}})
        self.assertTrue(all(i.priority is Priority.PRIMARY for i in result.ideas))

    def test_history_names_are_not_written_again(self):
        model = FakeModel(_ideas_json("Game A", "Game B"))
        repo = FakeRepo(history=["Game A"])
        result = _pipeline(_config(pipeline_mode="history"), model, repo).run()
        self.assertEqual([i.name for i in result.ideas], ["Game B"])
        self.assertEqual(len(repo.inserted), 1)
        self.assertIn("Game A", model.prompts[0])

    def test_no_feed_items_is_a_non_fatal_noop(self):
        model = FakeModel(_ideas_json("X"))
        repo = FakeRepo()
        feeds = [("IGN", [_item("Best monitors", 1, "https://a/1"), _item("Old demo", 24 * 30, "https://a/2")])]
        with self.assertRaises(EmptyResultError) as ctx:
            _pipeline(_config(), model, repo, feeds).run()
        self.assertFalse(ctx.exception.fatal)
        self.assertEqual(model.prompts, [])
        self.assertEqual(repo.inserted, [])

    def test_no_usable_idea_is_fatal(self):
        repo = FakeRepo(history=["Game A"])
        for response in ('{"ideas": []}', _ideas_json("Game A"), '{"ideas": [{"juego": "  "}]}'):
            with self.assertRaises(EmptyResultError, msg=response) as ctx:
                _pipeline(_config(pipeline_mode="history"), FakeModel(response), repo).run()
            self.assertTrue(ctx.exception.fatal)
        self.assertEqual(repo.inserted, [])

    def test_undecodable_model_output(self):
        repo = FakeRepo()
        with self.assertLogs("gamepulse.pipeline.orchestrator", level="ERROR") as logs:
            with self.assertRaises(ModelDecodeError):
                _pipeline(_config(pipeline_mode="history"), FakeModel("no JSON here"), repo).run()
        self.assertIn("no JSON here", "\n".join(logs.output))
        self.assertEqual(repo.inserted, [])

    def test_partial_write_failure_keeps_earlier_pages(self):
        repo = FakeRepo(fail_on="Game B")
        model = FakeModel(_ideas_json("Game A", "Game B", "Game C"))
        with self.assertRaises(PersistenceError):
            _pipeline(_config(pipeline_mode="history"), model, repo).run()
        self.assertEqual(len(repo.inserted), 1)
        self.assertEqual(repo.inserted[0]["Juego"]["title"][0]["text"]["content"], "Game A")

    def test_dry_run_writes_nothing(self):
        repo = FakeRepo()
        model = FakeModel(_ideas_json("Game A", "Game B"))
        result = _pipeline(_config(pipeline_mode="history", dry_run=True), model, repo).run()
        self.assertEqual(result.status, "dry_run")
        self.assertEqual(len(result.ideas), 2)
        self.assertEqual(repo.inserted, [])

    def test_primary_and_backup_split(self):
        repo = FakeRepo()
        model = FakeModel(_ideas_json(*[f"Game {i}" for i in range(7)]))
        result = _pipeline(_config(pipeline_mode="history"), model, repo).run()
        self.assertEqual(result.written, 5)
        self.assertEqual([p["Prioridad"]["select"]["name"] for p in repo.inserted], ["Principal"] * 3 + ["Backup"] * 2)


if __name__ == "__main__":
    unittest.main()
