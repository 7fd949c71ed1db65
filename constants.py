CONFIG_FILE = "config.csv"
SQLITEFILE = "football.db"
LOG_NAME = "football_bot"

LEADERBOARD_PAGE_SIZE = 10
MATCHES_PAGE_SIZE = 5
DEBT_LIST_PAGE_SIZE = 10
AUTOCOMPLETE_LIMIT = 25

# seconds
DEFERRED_SESSION_TIMEOUT = 300
INLINE_SESSION_TIMEOUT = 60
ERROR_NOTICE_LIFETIME = 10

CURRENCY = "€"

DATABASE_STRUCTURE = {
    "players": ["id", "name", "elo", "matches", "wins"],
    "matches": ["id", "date", "time", "location", "price", "result"],
    "player_matches": ["id", "player_id", "match_id", "team", "paid"],
}

DATABASE_STRUCTURE_CREATIONSTRINGMAPPING = {
    "Tables": {
        "players": "id INTEGER PRIMARY KEY AUTOINCREMENT",
        "matches": "id INTEGER PRIMARY KEY AUTOINCREMENT",
        "player_matches": "id INTEGER PRIMARY KEY AUTOINCREMENT",
    },
    "players": {
        "name": "TEXT NOT NULL DEFAULT ''",
        "elo": "REAL DEFAULT 1000",
        "matches": "INTEGER DEFAULT 0",
        "wins": "INTEGER DEFAULT 0",
    },
    "matches": {
        "date": "TEXT NOT NULL DEFAULT ''",
        "time": "TEXT DEFAULT ''",
        "location": "TEXT DEFAULT ''",
        "price": "REAL DEFAULT 0",
        "result": "TEXT DEFAULT null",
    },
    "player_matches": {
        "player_id": "INTEGER",
        "match_id": "INTEGER",
        "team": "TEXT",
        "paid": "INTEGER DEFAULT 0",
        "foreignkeyconstraint": """
                FOREIGN KEY
                (
                    player_id
                ) REFERENCES players
                (
                    id
                ),
                FOREIGN KEY
                (
                    match_id
                ) REFERENCES matches
                (
                    id
                )""",
    },
}
