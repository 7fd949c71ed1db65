import os
import sqlite3
import tempfile
import unittest

import database
import database_initialiser
from paginator import PageRequest


def seed(db_path):
    conn = sqlite3.connect(db_path)
    c = conn.cursor()
    c.executemany(
        "INSERT INTO players (id, name, elo, matches, wins) VALUES (?, ?, ?, ?, ?)",
        [
            (1, "Rui", 1100.0, 3, 2),
            (2, "Ana", 1250.5, 4, 3),
            (3, "Zé", 990.0, 2, 0),
            (4, "Marta", 1010.0, 1, 1),
        ],
    )
    c.executemany(
        "INSERT INTO matches (id, date, time, location, price, result) VALUES (?, ?, ?, ?, ?, ?)",
        [
            (1, "2024-03-07", "20:00", "Campo Grande", 40.0, "3-2"),
            (2, "2024-03-14", "21:00", "Estádio Norte", 30.0, None),
        ],
    )
    c.executemany(
        "INSERT INTO player_matches (player_id, match_id, team, paid) VALUES (?, ?, ?, ?)",
        [
            (1, 1, "A", 0),
            (2, 1, "A", 1),
            (3, 1, "B", 0),
            (4, 1, "B", 0),
            (1, 2, "A", 0),
            (2, 2, "B", 0),
            (3, 2, "B", 1),
        ],
    )
    conn.commit()
    conn.close()


class TestDatabaseInitialiser(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmp.name, "test.db")

    def tearDown(self):
        self.tmp.cleanup()

    def test_init_db_creates_schema(self):
        missing, _, _ = database_initialiser.init_db(self.db_path, False)
        self.assertTrue(missing)

        missing, extra, wrong_type = database_initialiser.check_database_structure(self.db_path)
        self.assertEqual((missing, extra, wrong_type), ([], [], []))

    def test_init_db_adds_missing_column(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("CREATE TABLE players (id INTEGER PRIMARY KEY, name TEXT)")
        conn.execute("INSERT INTO players (id, name) VALUES (1, 'Rui')")
        conn.commit()
        conn.close()

        database_initialiser.init_db(self.db_path, False)

        conn = sqlite3.connect(self.db_path)
        row = conn.execute("SELECT name, elo, matches, wins FROM players").fetchone()
        conn.close()
        self.assertEqual(row, ("Rui", 1000.0, 0, 0))

    def test_reduce_skips_columns_of_missing_tables(self):
        entries = [
            {"type": "table", "table": "players"},
            {"type": "column", "table": "players", "column": "elo"},
            {"type": "column", "table": "matches", "column": "price"},
        ]
        self.assertListEqual(
            database_initialiser.reduce(entries),
            [entries[0], entries[2]],
        )


class TestDatabase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmp.name, "test.db")
        database_initialiser.init_db(self.db_path, False)
        seed(self.db_path)
        self.previous_db = database.getCurrentDBFile()
        database.setCurrentDBFile(self.db_path)

    def tearDown(self):
        database.setCurrentDBFile(self.previous_db)
        self.tmp.cleanup()

    async def test_players_pages(self):
        self.assertEqual(await database.count_players(), 4)

        first = await database.fetch_players_page(PageRequest(0, 3))
        self.assertListEqual([p["name"] for p in first], ["Ana", "Rui", "Marta"])
        second = await database.fetch_players_page(PageRequest(3, 3))
        self.assertListEqual([p["name"] for p in second], ["Zé"])
        self.assertListEqual(await database.fetch_players_page(PageRequest(6, 3)), [])

    async def test_matches_pages_with_teams(self):
        self.assertEqual(await database.count_matches(), 2)

        (latest,) = await database.fetch_matches_page(PageRequest(0, 1))
        self.assertEqual(latest["location"], "Estádio Norte")
        self.assertDictEqual(latest["teams"], {"A": ["Rui"], "B": ["Ana", "Zé"]})

        (older,) = await database.fetch_matches_page(PageRequest(1, 1))
        self.assertEqual(older["result"], "3-2")

    async def test_get_match(self):
        match = await database.get_match(1)
        self.assertDictEqual(match["teams"], {"A": ["Rui", "Ana"], "B": ["Zé", "Marta"]})
        self.assertIsNone(await database.get_match(99))

    async def test_debt(self):
        unpaid = await database.get_unpaid_matches(1)
        self.assertListEqual([m["match_id"] for m in unpaid], [1, 2])
        self.assertListEqual([m["player_count"] for m in unpaid], [4, 3])

        debts = await database.get_debt_list()
        self.assertListEqual([d["name"] for d in debts], ["Rui", "Zé", "Marta", "Ana"])
        self.assertAlmostEqual(debts[0]["debt"], 20.0)
        self.assertEqual(debts[0]["unpaid_games"], 2)

    async def test_mark_paid(self):
        player_match = await database.get_player_match(1, 1)
        self.assertEqual(player_match["paid"], 0)

        self.assertEqual(await database.mark_paid(player_match["id"]), 1)

        self.assertEqual((await database.get_player_match(1, 1))["paid"], 1)
        self.assertListEqual(
            [m["match_id"] for m in await database.get_unpaid_matches(1)], [2]
        )
        self.assertIsNone(await database.get_player_match(4, 2))

    async def test_search_players(self):
        found = await database.search_players("r")
        self.assertListEqual([p["name"] for p in found], ["Marta", "Rui"])
        self.assertEqual(len(await database.search_players("")), 4)
        self.assertListEqual(await database.search_players("%"), [])

    async def test_search_matches(self):
        by_date = await database.search_matches("07-03-2024")
        self.assertListEqual([m["id"] for m in by_date], [1])
        by_location = await database.search_matches("norte")
        self.assertListEqual([m["id"] for m in by_location], [2])
        everything = await database.search_matches("")
        self.assertListEqual([m["id"] for m in everything], [2, 1])


if __name__ == "__main__":
    unittest.main()
