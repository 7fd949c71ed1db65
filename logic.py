from datetime import date, datetime

SEARCH_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y")


def match_share(price, player_count):
    if player_count <= 0:
        return 0.0
    return price / player_count


def total_debt(unpaid_matches):
    return sum(match_share(m["price"], m["player_count"]) for m in unpaid_matches)


def build_debt_list(rows):
    """Collapse one row per unpaid participation into one entry per player.

    Each row needs ``player_id``, ``name``, ``price`` and ``player_count``.
    """
    debts = {}
    for row in rows:
        entry = debts.setdefault(
            row["player_id"],
            {"id": row["player_id"], "name": row["name"], "debt": 0.0, "unpaid_games": 0},
        )
        entry["debt"] += match_share(row["price"], row["player_count"])
        entry["unpaid_games"] += 1

    return sorted(debts.values(), key=lambda x: x["debt"], reverse=True)


def group_teams(rows):
    teams = {}
    for row in rows:
        teams.setdefault(row["team"], []).append(row["name"])
    return teams


def to_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def format_date(value):
    return to_date(value).strftime("%d-%m-%Y")


def parse_search_date(term):
    term = (term or "").strip()
    for fmt in SEARCH_DATE_FORMATS:
        try:
            return datetime.strptime(term, fmt).date()
        except ValueError:
            continue
    return None


def medal(rank):
    match rank:
        case 1:
            return "🥇"
        case 2:
            return "🥈"
        case 3:
            return "🥉"
        case _:
            return f"{rank}."


def plural(count, word):
    return word if count == 1 else f"{word}s"
