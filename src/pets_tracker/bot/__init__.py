"""Telegram bot commands."""

from pets_tracker.bot.commands import TelegramCommandBot

__all__ = ["TelegramCommandBot"]
