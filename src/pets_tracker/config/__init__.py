"""Configuration subpackage."""

from pets_tracker.config.config import (
    ApiSettings,
    AppSettings,
    BscChainSettings,
    ChainSettings,
    ConsoleNotificationSettings,
    EthereumChainSettings,
    FanoutSettings,
    HistorySettings,
    LoggingSettings,
    MediaSettings,
    PriceSettings,
    SchedulerSettings,
    Settings,
    StatusApiSettings,
    TelegramNotificationSettings,
    TradeSignalSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "BscChainSettings",
    "ChainSettings",
    "ConsoleNotificationSettings",
    "EthereumChainSettings",
    "FanoutSettings",
    "HistorySettings",
    "LoggingSettings",
    "MediaSettings",
    "PriceSettings",
    "SchedulerSettings",
    "Settings",
    "StatusApiSettings",
    "TelegramNotificationSettings",
    "TradeSignalSettings",
    "get_settings",
]
