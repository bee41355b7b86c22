import os
import unittest
from unittest import mock

import content_ideas_worker as worker
from gamepulse.config import Config
from gamepulse.errors import EmptyResultError, ModelDecodeError, PersistenceError
from gamepulse.pipeline.orchestrator import RunResult


def _config():
    return Config(openai_api_key="sk", notion_api_key="secret", notion_database_id="a" * 32)


class StubPipeline:
    def __init__(self, outcome):
        self.outcome = outcome

    def run(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class TestRunOnce(unittest.TestCase):
    def test_exit_codes(self):
        cases = [
            (RunResult(status="done", written=3), worker.EXIT_OK),
            (RunResult(status="dry_run"), worker.EXIT_OK),
            (EmptyResultError("no items", fatal=False), worker.EXIT_OK),
            (EmptyResultError("no ideas", fatal=True), worker.EXIT_FAILED),
            (ModelDecodeError("bad json", raw="x"), worker.EXIT_FAILED),
            (PersistenceError("400", status=400), worker.EXIT_FAILED),
            (RuntimeError("unexpected"), worker.EXIT_FAILED),
        ]
        for outcome, expected in cases:
            with self.subTest(outcome=outcome):
                self.assertEqual(worker.run_once(_config(), StubPipeline(outcome)), expected)


class TestMain(unittest.TestCase):
    def test_config_error_exit_code(self):
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch.object(worker, "load_dotenv"):
            self.assertEqual(worker.main([]), worker.EXIT_CONFIG)

    def test_cli_flags_override_config(self):
        env = {"OPENAI_API_KEY": "sk", "NOTION_API_KEY": "secret", "NOTION_DATABASE_ID": "a" * 32}
        with mock.patch.dict(os.environ, env, clear=True), \
                mock.patch.object(worker, "load_dotenv"), \
                mock.patch.object(worker, "configure_logging"), \
                mock.patch.object(worker, "run_once", return_value=worker.EXIT_OK) as run_once:
            self.assertEqual(worker.main(["--mode", "history", "--dry-run"]), worker.EXIT_OK)
        config = run_once.call_args[0][0]
        self.assertEqual(config.pipeline_mode, "history")
        self.assertTrue(config.dry_run)


if __name__ == "__main__":
    unittest.main()
