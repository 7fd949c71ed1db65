from constants import CURRENCY
from logic import format_date, match_share, medal, plural


def render_leaderboard(page, page_index, total_pages):
    lines = ["🏆 **Leaderboard**"]
    if not page.items:
        lines.append("No players registered yet.")
    else:
        first = page.offset + 1
        last = page.offset + len(page.items)
        lines.append(f"Top players {first}-{last} out of {page.total_count}")
        for rank, player in enumerate(page.items, start=first):
            lines.append(
                f"\n{medal(rank)} **{player['name']}**\n"
                f"ELO: {player['elo']:.2f} | Matches: {player['matches']} | Wins: {player['wins']}"
            )
    lines.append(f"\nPage {page_index + 1}/{total_pages}")
    return "\n".join(lines)


def format_teams(teams, label="Team"):
    return "".join(
        f"**{label} {team}:** {', '.join(names)}\n" for team, names in teams.items()
    )


def render_matches(page, page_index, total_pages):
    lines = ["⚽ **Recent Matches**"]
    if not page.items:
        lines.append("No matches recorded yet.")
    else:
        first = page.offset + 1
        last = page.offset + len(page.items)
        lines.append(f"Showing matches {first}-{last} out of {page.total_count}")
        for number, match in enumerate(page.items, start=1):
            details = (
                f"\n__Match {number}__\n"
                f"📅 {format_date(match['date'])}\n"
                f"⏰ {match['time']}\n"
                f"📍 {match['location']}\n"
            )
            details += format_teams(match["teams"])
            if match["result"]:
                details += f"**Result:** {match['result']}\n"
            lines.append(details.rstrip("\n"))
    lines.append(f"\nPage {page_index + 1}/{total_pages}")
    return "\n".join(lines)


def render_debt_list(page, page_index, total_pages):
    lines = [
        f"💸 **Players Owing Money (Page {page_index + 1}/{total_pages})**",
        "List of players with outstanding debts",
    ]
    for number, player in enumerate(page.items, start=1):
        games = player["unpaid_games"]
        lines.append(
            f"\n{number}. **{player['name']}**\n"
            f"   {CURRENCY}{player['debt']:.2f} ({games} unpaid {plural(games, 'game')})"
        )
    return "\n".join(lines)


def render_player_debt(player, unpaid_matches):
    if not unpaid_matches:
        return f"{player['name']} doesn't owe any money."

    total = 0.0
    rows = []
    for number, match in enumerate(unpaid_matches, start=1):
        share = match_share(match["price"], match["player_count"])
        total += share
        rows.append(
            f"{number}. {match['date']} - {match['time']} - {match['location']} "
            f"({CURRENCY}{share:.2f})"
        )

    return (
        f"**{player['name']}'s Debt**\n"
        f"Total amount owed: {CURRENCY}{total:.2f}\n\n"
        "**Unpaid Matches**\n" + "\n".join(rows) + "\n\n"
        f"**Current ELO:** {player['elo']:.0f}\n"
        f"**Total Matches:** {player['matches']}\n"
        f"**Wins:** {player['wins']}"
    )


def render_payment_marked(player, match):
    return (
        "✅ **Payment Marked**\n"
        f"Successfully marked {player['name']} as paid for the match.\n"
        f"Date: {format_date(match['date'])} | Time: {match['time']} | "
        f"Location: {match['location']}"
    )


def render_match_details(match):
    details = (
        "**Detalhes do Jogo**\n"
        f"Jogo em {format_date(match['date'])}\n\n"
        f"📅 {format_date(match['date'])}\n"
        f"⏰ {match['time']}\n"
        f"📍 {match['location']}\n"
        f"💰 Preço: {CURRENCY}{match['price']:.2f}\n\n"
    )
    details += format_teams(match["teams"], label="Equipe")
    if match["result"]:
        details += f"\n**Resultado:** {match['result']}"
    return details.rstrip("\n")


def match_choice_name(match):
    return f"{format_date(match['date'])} - {match['time']} - {match['location']}"
