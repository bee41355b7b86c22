import unittest
from types import SimpleNamespace
from unittest import mock

import httpx
import openai

from gamepulse.llm.openai_client import IdeaModel
from gamepulse.llm.prompts import SYSTEM_PROMPT


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _connection_error():
    return openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))


class TestIdeaModel(unittest.TestCase):
    def setUp(self):
        self.client = mock.Mock()

    def test_generate_returns_raw_text(self):
        self.client.chat.completions.create.return_value = _completion('{"ideas": []}')
        model = IdeaModel("sk", model="gpt-4o-mini", client=self.client)
        self.assertEqual(model.generate("hola"), '{"ideas": []}')
        kwargs = self.client.chat.completions.create.call_args[1]
        self.assertEqual(kwargs["model"], "gpt-4o-mini")
        self.assertEqual(kwargs["messages"][0], {"role": "system", "content": SYSTEM_PROMPT})
        self.assertEqual(kwargs["messages"][1], {"role": "user", "content": "hola"})
        self.assertEqual(kwargs["response_format"], {"type": "json_object"})

    def test_empty_choices(self):
        self.client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        self.assertEqual(IdeaModel("sk", client=self.client).generate("x"), "")

    @mock.patch("gamepulse.utils.retry.time.sleep")
    def test_transient_errors_are_retried(self, sleep):
        self.client.chat.completions.create.side_effect = [_connection_error(), _completion("{}")]
        self.assertEqual(IdeaModel("sk", max_retries=3, client=self.client).generate("x"), "{}")
        self.assertEqual(self.client.chat.completions.create.call_count, 2)
        sleep.assert_called_once()

    @mock.patch("gamepulse.utils.retry.time.sleep")
    def test_gives_up_after_max_retries(self, sleep):
        self.client.chat.completions.create.side_effect = _connection_error()
        with self.assertRaises(openai.APIConnectionError):
            IdeaModel("sk", max_retries=2, client=self.client).generate("x")
        self.assertEqual(self.client.chat.completions.create.call_count, 2)

    @mock.patch("gamepulse.utils.retry.time.sleep")
    def test_other_errors_are_not_retried(self, sleep):
        self.client.chat.completions.create.side_effect = ValueError("bad request")
        with self.assertRaises(ValueError):
            IdeaModel("sk", client=self.client).generate("x")
        self.assertEqual(self.client.chat.completions.create.call_count, 1)
        sleep.assert_not_called()


if __name__ == "__main__":
    unittest.main()
