import unittest

from gamepulse.text.normalize import (
    ELLIPSIS,
    collapse_whitespace,
    name_key,
    normalize_key,
    strip_html,
    truncate,
)


class TestTextNormalize(unittest.TestCase):
    def test_normalize_key_lowercases_and_collapses(self):
        self.assertEqual(normalize_key("  Hollow   Knight:\n Silksong "), "hollow knight: silksong")

    def test_none_is_empty(self):
        self.assertEqual(normalize_key(None), "")
        self.assertEqual(collapse_whitespace(None), "")
        self.assertEqual(truncate(None, 10), "")

    def test_truncate_short_text_is_unchanged(self):
        text = "Demo disponible"
        self.assertIs(truncate(text, len(text)), text)
        self.assertEqual(truncate(text, 100), text)

    def test_truncate_long_text_hits_limit_with_one_ellipsis(self):
        out = truncate("x" * 300, 240)
        self.assertEqual(len(out), 240)
        self.assertTrue(out.endswith(ELLIPSIS))
        self.assertEqual(out.count(ELLIPSIS), 1)
        self.assertEqual(out[:-1], "x" * 239)

    def test_truncate_non_positive_limit(self):
        self.assertEqual(truncate("abc", 0), "")

    def test_name_key_folds_diacritics_and_punctuation(self):
        self.assertEqual(name_key("Pokémon Legends: Z-A!"), name_key("pokemon legends: z-a"))
        self.assertEqual(name_key("  Game   A "), "game a")
        self.assertNotEqual(name_key("Game A"), name_key("Game B"))

    def test_strip_html(self):
        self.assertEqual(collapse_whitespace(strip_html("<p>Nuevo <b>tráiler</b> &amp; demo</p>")), "Nuevo tráiler & demo")


if __name__ == "__main__":
    unittest.main()
