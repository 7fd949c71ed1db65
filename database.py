import aiosqlite

from constants import AUTOCOMPLETE_LIMIT, SQLITEFILE
from logic import build_debt_list, group_teams, parse_search_date

_db_file = SQLITEFILE


def setCurrentDBFile(db_file):
    global _db_file
    _db_file = db_file


def getCurrentDBFile():
    return _db_file


def _connect():
    return aiosqlite.connect(_db_file)


async def _fetch_all(sql, params=()):
    async with _connect() as conn:
        conn.row_factory = aiosqlite.Row
        cur = await conn.execute(sql, params)
        rows = await cur.fetchall()
        await cur.close()
    return [dict(row) for row in rows]


async def _fetch_one(sql, params=()):
    rows = await _fetch_all(sql, params)
    return rows[0] if rows else None


async def count_players():
    row = await _fetch_one("SELECT COUNT(*) AS cnt FROM players")
    return row["cnt"]


async def fetch_players_page(request):
    return await _fetch_all(
        """SELECT id, name, elo, matches, wins
           FROM players
           ORDER BY elo DESC, id
           LIMIT ? OFFSET ?""",
        (request.limit, request.offset),
    )


async def get_player(player_id):
    return await _fetch_one(
        "SELECT id, name, elo, matches, wins FROM players WHERE id = ?", (player_id,)
    )


async def _attach_teams(conn, matches):
    if not matches:
        return matches
    ids = [m["id"] for m in matches]
    cur = await conn.execute(
        f"""SELECT pm.match_id, pm.team, p.name
            FROM player_matches pm
            JOIN players p ON p.id = pm.player_id
            WHERE pm.match_id IN ({','.join('?' * len(ids))})
            ORDER BY pm.team, pm.id""",
        ids,
    )
    rows = await cur.fetchall()
    await cur.close()
    by_match = {}
    for row in rows:
        by_match.setdefault(row["match_id"], []).append(row)
    for match in matches:
        match["teams"] = group_teams(by_match.get(match["id"], []))
    return matches


async def count_matches():
    row = await _fetch_one("SELECT COUNT(*) AS cnt FROM matches")
    return row["cnt"]


async def fetch_matches_page(request):
    async with _connect() as conn:
        conn.row_factory = aiosqlite.Row
        cur = await conn.execute(
            """SELECT id, date, time, location, price, result
               FROM matches
               ORDER BY date DESC, time DESC, id DESC
               LIMIT ? OFFSET ?""",
            (request.limit, request.offset),
        )
        matches = [dict(row) for row in await cur.fetchall()]
        await cur.close()
        return await _attach_teams(conn, matches)


async def get_match(match_id):
    async with _connect() as conn:
        conn.row_factory = aiosqlite.Row
        cur = await conn.execute(
            "SELECT id, date, time, location, price, result FROM matches WHERE id = ?",
            (match_id,),
        )
        row = await cur.fetchone()
        await cur.close()
        if row is None:
            return None
        (match,) = await _attach_teams(conn, [dict(row)])
        return match


async def get_player_match(player_id, match_id):
    return await _fetch_one(
        """SELECT id, player_id, match_id, team, paid
           FROM player_matches
           WHERE player_id = ? AND match_id = ?
           ORDER BY id LIMIT 1""",
        (player_id, match_id),
    )


async def mark_paid(player_match_id):
    async with _connect() as conn:
        cur = await conn.execute(
            "UPDATE player_matches SET paid = 1 WHERE id = ?", (player_match_id,)
        )
        updated = cur.rowcount
        await cur.close()
        await conn.commit()
    return updated


_UNPAID_SQL = """
    SELECT p.id AS player_id, p.name, m.id AS match_id, m.date, m.time,
           m.location, m.price,
           (SELECT COUNT(*) FROM player_matches o WHERE o.match_id = m.id) AS player_count
    FROM player_matches pm
    JOIN players p ON p.id = pm.player_id
    JOIN matches m ON m.id = pm.match_id
    WHERE pm.paid = 0
"""


async def get_unpaid_matches(player_id):
    return await _fetch_all(
        _UNPAID_SQL + " AND pm.player_id = ? ORDER BY pm.id", (player_id,)
    )


async def get_debt_list():
    rows = await _fetch_all(_UNPAID_SQL + " ORDER BY pm.id")
    return build_debt_list(rows)


async def search_players(term, limit=AUTOCOMPLETE_LIMIT):
    return await _fetch_all(
        """SELECT id, name FROM players
           WHERE name LIKE ? ESCAPE '\\'
           ORDER BY name COLLATE NOCASE
           LIMIT ?""",
        (_like_pattern(term), limit),
    )


async def search_matches(term, limit=AUTOCOMPLETE_LIMIT):
    day = parse_search_date(term)
    if day is not None:
        where, params = "substr(date, 1, 10) = ?", (day.isoformat(),)
    else:
        where, params = "location LIKE ? ESCAPE '\\'", (_like_pattern(term),)
    return await _fetch_all(
        f"""SELECT id, date, time, location FROM matches
            WHERE {where}
            ORDER BY date DESC, time DESC, id DESC
            LIMIT ?""",
        params + (limit,),
    )


def _like_pattern(term):
    term = (term or "").replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{term}%"
