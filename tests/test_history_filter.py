import unittest

from gamepulse.contracts.content_idea import CandidateIdea, Priority
from gamepulse.ideas.dedup import MAX_IDEAS, PRIMARY_IDEAS, assign_priorities, filter_against_history


def _ideas(*names):
    return [CandidateIdea(name=n) for n in names]


class TestHistoryFilter(unittest.TestCase):
    def test_history_collision_is_dropped(self):
        out = filter_against_history(_ideas("Game A", "Game B"), ["Game A"])
        self.assertEqual([i.name for i in out], ["Game B"])

    def test_normalized_comparison(self):
        out = filter_against_history(_ideas("  game   a ", "Pokemon Z-A", "Nuevo"), ["Game A", "Pokémon Z-A"])
        self.assertEqual([i.name for i in out], ["Nuevo"])

    def test_first_in_batch_wins(self):
        first = CandidateIdea(name="Starfall", summary="first")
        second = CandidateIdea(name="STARFALL", summary="second")
        out = filter_against_history([first, CandidateIdea(name="Other"), second], [])
        self.assertEqual([i.summary for i in out if i.name.lower() == "starfall"], ["first"])
        self.assertEqual(len(out), 2)

    def test_symbol_only_names_are_kept_and_compared(self):
        out = filter_against_history(_ideas("!!!", "\U0001F3AE\U0001F525", " !!! ", "Game A"), ["\U0001F3AE\U0001F525"])
        self.assertEqual([i.name for i in out], ["!!!", "Game A"])

    def test_cap_is_primary_plus_backups(self):
        self.assertEqual(MAX_IDEAS, 5)
        out = filter_against_history(_ideas(*[f"Game {i}" for i in range(9)]), ["Game 0"])
        self.assertEqual([i.name for i in out], [f"Game {i}" for i in range(1, 6)])

    def test_assign_priorities(self):
        out = assign_priorities(_ideas("a", "b", "c", "d", "e"))
        self.assertEqual([i.priority for i in out[:PRIMARY_IDEAS]], [Priority.PRIMARY] * PRIMARY_IDEAS)
        self.assertEqual([i.priority for i in out[PRIMARY_IDEAS:]], [Priority.BACKUP] * 2)


if __name__ == "__main__":
    unittest.main()
