import csv

import discord
from discord import app_commands
from discord.ext import commands

import database
from constants import (
    AUTOCOMPLETE_LIMIT,
    CONFIG_FILE,
    DEBT_LIST_PAGE_SIZE,
    DEFERRED_SESSION_TIMEOUT,
    INLINE_SESSION_TIMEOUT,
    LEADERBOARD_PAGE_SIZE,
    MATCHES_PAGE_SIZE,
    SQLITEFILE,
)
from database_initialiser import init_db
from discord_channel import InteractionChannel
from logger import get_logger, setup_logger
from paginator import PageResult, Paginator, count_pages
from renderers import (
    match_choice_name,
    render_debt_list,
    render_leaderboard,
    render_match_details,
    render_matches,
    render_payment_marked,
    render_player_debt,
)

log = get_logger("bot")


def load_config(path=CONFIG_FILE):
    config = {}
    try:
        with open(path, mode="r", newline="") as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                config[row["setting"].strip()] = (row["value"] or "").strip()
    except FileNotFoundError:
        raise FileNotFoundError(f"{path} file not found")
    except (csv.Error, KeyError) as e:
        raise ValueError(f"Error reading {path}: {e}") from e

    if not config.get("token"):
        raise ValueError(f"Bot token not found in {path}")
    if config.get("guild_id"):
        config["guild_id"] = int(config["guild_id"])
    else:
        config["guild_id"] = None
    config["database"] = config.get("database") or SQLITEFILE
    return config


class FootballBot(commands.Bot):
    def __init__(self, guild_id=None):
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=discord.Intents.default(),
            help_command=None,
        )
        self.guild_id = guild_id
        self.tree.add_command(leaderboard)
        self.tree.add_command(matches)
        self.tree.add_command(debtlist)
        self.tree.add_command(playerdebt)
        self.tree.add_command(markpaid)
        self.tree.add_command(jogo)
        self.tree.on_error = on_app_command_error

    async def on_ready(self):
        log.info("Bot is ready! Logged in as %s (%s)", self.user, self.user.id)
        try:
            if self.guild_id:
                guild = discord.Object(id=self.guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
            else:
                synced = await self.tree.sync()
            log.info("Synced %d slash commands", len(synced))
        except discord.HTTPException as e:
            log.error("Error registering commands: %s", e)


async def paginate(interaction, fetch_count, fetch_page, render, **options):
    paginator = Paginator(
        InteractionChannel(interaction),
        fetch_count,
        fetch_page,
        render,
        owner_id=interaction.user.id,
        **options,
    )
    await paginator.start()
    return paginator


@app_commands.command(name="leaderboard", description="Show the player leaderboard")
async def leaderboard(interaction: discord.Interaction):
    await interaction.response.defer()
    await paginate(
        interaction,
        database.count_players,
        database.fetch_players_page,
        render_leaderboard,
        page_size=LEADERBOARD_PAGE_SIZE,
        session_timeout=DEFERRED_SESSION_TIMEOUT,
    )


@app_commands.command(name="matches", description="Show recent matches")
async def matches(interaction: discord.Interaction):
    await interaction.response.defer()
    await paginate(
        interaction,
        database.count_matches,
        database.fetch_matches_page,
        render_matches,
        page_size=MATCHES_PAGE_SIZE,
        session_timeout=DEFERRED_SESSION_TIMEOUT,
        restrict_to_owner=False,
    )


@app_commands.command(name="debtlist", description="Show a list of players who owe money")
async def debtlist(interaction: discord.Interaction):
    await interaction.response.defer()
    debts = await database.get_debt_list()
    if not debts:
        await interaction.edit_original_response(content="No players currently owe any money.")
        return

    if count_pages(len(debts), DEBT_LIST_PAGE_SIZE) == 1:
        page = PageResult(debts, len(debts))
        await interaction.edit_original_response(content=render_debt_list(page, 0, 1))
        return

    await paginate(
        interaction,
        lambda: len(debts),
        lambda request: debts[request.offset : request.offset + request.limit],
        render_debt_list,
        page_size=DEBT_LIST_PAGE_SIZE,
        session_timeout=INLINE_SESSION_TIMEOUT,
        wrap_navigation=True,
    )


async def player_autocomplete(interaction: discord.Interaction, current: str):
    try:
        players = await database.search_players(current)
    except Exception as e:
        log.error("Error in player autocomplete: %s", e)
        return []
    return [
        app_commands.Choice(name=p["name"][:100], value=str(p["id"]))
        for p in players[:AUTOCOMPLETE_LIMIT]
    ]


async def match_autocomplete(interaction: discord.Interaction, current: str):
    try:
        found = await database.search_matches(current)
    except Exception as e:
        log.error("Error in match autocomplete: %s", e)
        return []
    return [
        app_commands.Choice(name=match_choice_name(m)[:100], value=str(m["id"]))
        for m in found[:AUTOCOMPLETE_LIMIT]
    ]


def parse_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@app_commands.command(name="playerdebt", description="Show how much a player owes")
@app_commands.describe(player="Select the player")
@app_commands.autocomplete(player=player_autocomplete)
async def playerdebt(interaction: discord.Interaction, player: str):
    player_id = parse_id(player)
    data = await database.get_player(player_id) if player_id is not None else None
    if not data:
        await interaction.response.send_message("Invalid player selected.")
        return

    unpaid = await database.get_unpaid_matches(player_id)
    await interaction.response.send_message(render_player_debt(data, unpaid))


@app_commands.command(name="markpaid", description="Mark a player as paid for a specific match")
@app_commands.describe(player="Select the player", match="Select the match")
@app_commands.autocomplete(player=player_autocomplete, match=match_autocomplete)
async def markpaid(interaction: discord.Interaction, player: str, match: str):
    player_id, match_id = parse_id(player), parse_id(match)
    player_data = await database.get_player(player_id) if player_id is not None else None
    match_data = await database.get_match(match_id) if match_id is not None else None

    if not player_data or not match_data:
        await interaction.response.send_message(
            "Invalid player or match selected.", ephemeral=True
        )
        return

    player_match = await database.get_player_match(player_id, match_id)
    if not player_match:
        await interaction.response.send_message(
            f"No record found for {player_data['name']} in the match on "
            f"{match_choice_name(match_data)}.",
            ephemeral=True,
        )
        return

    await database.mark_paid(player_match["id"])
    log.info("Marked player %s as paid for match %s", player_id, match_id)
    await interaction.response.send_message(render_payment_marked(player_data, match_data))


@app_commands.command(name="jogo", description="Mostrar detalhes de um jogo específico")
@app_commands.describe(jogo="Selecione o jogo")
@app_commands.autocomplete(jogo=match_autocomplete)
async def jogo(interaction: discord.Interaction, jogo: str):
    await interaction.response.defer()
    match_id = parse_id(jogo)
    match = await database.get_match(match_id) if match_id is not None else None
    if not match:
        await interaction.edit_original_response(content="Jogo não encontrado.")
        return
    await interaction.edit_original_response(content=render_match_details(match))


async def on_app_command_error(
    interaction: discord.Interaction, error: app_commands.AppCommandError
):
    name = interaction.command.name if interaction.command else "unknown"
    if isinstance(error, app_commands.CheckFailure):
        return
    log.error("Error in %s command", name, exc_info=error)
    message = f"An error occurred while executing the {name} command."
    try:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)
    except discord.HTTPException as e:
        log.error("Couldn't report error for %s: %s", name, e)


def main():
    setup_logger()
    try:
        config = load_config()
    except Exception as e:
        log.error("Configuration error: %s", e)
        raise SystemExit(1)

    database.setCurrentDBFile(config["database"])
    init_db(config["database"])

    bot = FootballBot(guild_id=config["guild_id"])
    try:
        bot.run(config["token"])
    except discord.LoginFailure:
        log.error("Invalid bot token in %s. Please check your token.", CONFIG_FILE)


if __name__ == "__main__":
    main()
