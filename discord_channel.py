import asyncio

import discord

from constants import ERROR_NOTICE_LIFETIME
from logger import get_logger
from paginator import Control, ControlEvent

log = get_logger("discord_channel")


class PaginatorView(discord.ui.View):
    """Previous / page counter / Next buttons.

    Clicks are acknowledged straight away, so a click waiting behind a slow
    page still answers within Discord's window, then queued as
    :class:`ControlEvent` objects for the paginator. The view never times out
    on its own.
    """

    def __init__(self, events: asyncio.Queue):
        super().__init__(timeout=None)
        self.events = events

    def apply(self, controls):
        self.previous_button.disabled = controls.previous_disabled
        self.next_button.disabled = controls.next_disabled
        self.page_count.label = controls.label
        if controls.closed:
            self.stop()

    async def _push(self, interaction: discord.Interaction, control: Control):
        try:
            await interaction.response.defer()
        except discord.HTTPException as e:
            log.info("Couldn't acknowledge %s click: %s", control.value, e)
        self.events.put_nowait(
            ControlEvent(actor_id=interaction.user.id, control=control, origin=interaction)
        )

    @discord.ui.button(label="◀️ Previous", style=discord.ButtonStyle.blurple)
    async def previous_button(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ):
        await self._push(interaction, Control.PREVIOUS)

    @discord.ui.button(label="Page 1/1", style=discord.ButtonStyle.grey, disabled=True)
    async def page_count(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ):
        pass

    @discord.ui.button(label="Next ▶️", style=discord.ButtonStyle.blurple)
    async def next_button(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ):
        await self._push(interaction, Control.NEXT)


def payload_kwargs(payload):
    if payload is None:
        return {}
    if isinstance(payload, discord.Embed):
        return {"content": None, "embed": payload}
    return {"content": str(payload)}


class InteractionChannel:
    """Delivers a paginated reply to a slash command interaction."""

    def __init__(self, interaction: discord.Interaction):
        self.interaction = interaction
        self.events = asyncio.Queue()
        self.view = PaginatorView(self.events)

    async def post(self, payload, controls):
        self.view.apply(controls)
        kwargs = payload_kwargs(payload)
        if self.interaction.response.is_done():
            return await self.interaction.edit_original_response(view=self.view, **kwargs)
        await self.interaction.response.send_message(view=self.view, **kwargs)
        return await self.interaction.original_response()

    async def update(self, handle, payload, controls):
        self.view.apply(controls)
        await handle.edit(view=self.view, **payload_kwargs(payload))

    async def control_events(self, handle):
        while not self.view.is_finished():
            yield await self.events.get()

    async def notify_actor(self, event, message):
        interaction = event.origin
        if interaction is None:
            return
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)

    async def report_error(self, handle, message):
        await handle.reply(message, delete_after=ERROR_NOTICE_LIFETIME)
