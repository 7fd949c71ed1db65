import unittest
from datetime import date

from logic import (
    build_debt_list,
    format_date,
    group_teams,
    match_share,
    medal,
    parse_search_date,
    plural,
    total_debt,
)
from paginator import PageResult
from renderers import (
    match_choice_name,
    render_debt_list,
    render_leaderboard,
    render_match_details,
    render_matches,
    render_player_debt,
)


class TestLogic(unittest.TestCase):

    def test_match_share(self):
        self.assertEqual(match_share(50, 10), 5)
        self.assertAlmostEqual(match_share(40, 3), 13.333, 3)
        self.assertEqual(match_share(40, 0), 0.0)

    def test_total_debt(self):
        unpaid = [
            {"price": 50, "player_count": 10},
            {"price": 30, "player_count": 6},
        ]
        self.assertEqual(total_debt(unpaid), 10)
        self.assertEqual(total_debt([]), 0)

    def test_build_debt_list(self):
        rows = [
            {"player_id": 1, "name": "Rui", "price": 50, "player_count": 10},
            {"player_id": 2, "name": "Ana", "price": 64, "player_count": 4},
            {"player_id": 1, "name": "Rui", "price": 30, "player_count": 3},
        ]
        self.assertListEqual(
            build_debt_list(rows),
            [
                {"id": 2, "name": "Ana", "debt": 16.0, "unpaid_games": 1},
                {"id": 1, "name": "Rui", "debt": 15.0, "unpaid_games": 2},
            ],
        )

    def test_group_teams(self):
        rows = [
            {"team": "A", "name": "Rui"},
            {"team": "B", "name": "Ana"},
            {"team": "A", "name": "Zé"},
        ]
        self.assertDictEqual(group_teams(rows), {"A": ["Rui", "Zé"], "B": ["Ana"]})

    def test_format_date(self):
        self.assertEqual(format_date("2024-03-07"), "07-03-2024")
        self.assertEqual(format_date("2024-03-07T20:00:00"), "07-03-2024")
        self.assertEqual(format_date(date(2024, 12, 1)), "01-12-2024")

    def test_parse_search_date(self):
        self.assertEqual(parse_search_date("2024-03-07"), date(2024, 3, 7))
        self.assertEqual(parse_search_date("07-03-2024"), date(2024, 3, 7))
        self.assertEqual(parse_search_date("07/03/2024"), date(2024, 3, 7))
        self.assertIsNone(parse_search_date("Lisboa"))
        self.assertIsNone(parse_search_date(""))
        self.assertIsNone(parse_search_date(None))

    def test_medal(self):
        self.assertListEqual([medal(r) for r in range(1, 5)], ["🥇", "🥈", "🥉", "4."])

    def test_plural(self):
        self.assertEqual(plural(1, "game"), "game")
        self.assertEqual(plural(2, "game"), "games")


def _player(name, elo):
    return {"name": name, "elo": elo, "matches": 4, "wins": 2}


def _match(**kwargs):
    match = {
        "id": 1,
        "date": "2024-03-07",
        "time": "20:00",
        "location": "Campo Grande",
        "price": 60.0,
        "result": None,
        "teams": {"A": ["Rui", "Zé"], "B": ["Ana"]},
    }
    match.update(kwargs)
    return match


class TestRenderers(unittest.TestCase):

    def test_leaderboard_ranks_continue_across_pages(self):
        page = PageResult([_player("Rui", 1234.567), _player("Ana", 1100)], 12, offset=10)
        text = render_leaderboard(page, 1, 2)

        self.assertIn("Top players 11-12 out of 12", text)
        self.assertIn("11. **Rui**", text)
        self.assertIn("ELO: 1234.57 | Matches: 4 | Wins: 2", text)
        self.assertIn("12. **Ana**", text)
        self.assertTrue(text.endswith("Page 2/2"))

    def test_leaderboard_medals_on_first_page(self):
        page = PageResult([_player("Rui", 1300), _player("Ana", 1200)], 2)
        text = render_leaderboard(page, 0, 1)

        self.assertIn("🥇 **Rui**", text)
        self.assertIn("🥈 **Ana**", text)

    def test_empty_leaderboard(self):
        text = render_leaderboard(PageResult([], 0), 0, 1)
        self.assertIn("No players registered yet.", text)

    def test_matches(self):
        page = PageResult([_match(result="3-2")], 6, offset=5)
        text = render_matches(page, 1, 2)

        self.assertIn("Showing matches 6-6 out of 6", text)
        self.assertIn("📅 07-03-2024", text)
        self.assertIn("**Team A:** Rui, Zé", text)
        self.assertIn("**Result:** 3-2", text)
        self.assertIn("Page 2/2", text)

    def test_debt_list(self):
        debts = [
            {"name": "Rui", "debt": 15.0, "unpaid_games": 2},
            {"name": "Ana", "debt": 5.5, "unpaid_games": 1},
        ]
        text = render_debt_list(PageResult(debts, 12, offset=10), 1, 2)

        self.assertIn("Players Owing Money (Page 2/2)", text)
        self.assertIn("1. **Rui**\n   €15.00 (2 unpaid games)", text)
        self.assertIn("2. **Ana**\n   €5.50 (1 unpaid game)", text)

    def test_player_debt(self):
        player = {"name": "Rui", "elo": 1012.4, "matches": 9, "wins": 5}
        unpaid = [
            {"date": "2024-03-07", "time": "20:00", "location": "Campo", "price": 60, "player_count": 12},
            {"date": "2024-03-14", "time": "21:00", "location": "Campo", "price": 30, "player_count": 10},
        ]
        text = render_player_debt(player, unpaid)

        self.assertIn("Total amount owed: €8.00", text)
        self.assertIn("1. 2024-03-07 - 20:00 - Campo (€5.00)", text)
        self.assertIn("**Current ELO:** 1012", text)
        self.assertEqual(render_player_debt(player, []), "Rui doesn't owe any money.")

    def test_match_details(self):
        text = render_match_details(_match(result="3-2"))

        self.assertIn("💰 Preço: €60.00", text)
        self.assertIn("**Equipe B:** Ana", text)
        self.assertTrue(text.endswith("**Resultado:** 3-2"))

    def test_match_choice_name(self):
        self.assertEqual(match_choice_name(_match()), "07-03-2024 - 20:00 - Campo Grande")
