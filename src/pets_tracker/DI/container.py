# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from pets_tracker.api.status_api import StatusServer
from pets_tracker.bot.commands import TelegramCommandBot
from pets_tracker.clients.chain_client import ChainClient
from pets_tracker.clients.coingecko import CoinGeckoClient
from pets_tracker.clients.http import AsyncHttpClient
from pets_tracker.config import Settings, get_settings
from pets_tracker.notifications.dispatcher import NotificationDispatcher
from pets_tracker.notifications.fanout import NotificationFanout
from pets_tracker.notifications.media import MediaCatalog
from pets_tracker.notifications.strategies.base import BaseNotificationStrategy
from pets_tracker.notifications.strategies.console import ConsoleNotifier
from pets_tracker.notifications.strategies.telegram import TelegramNotifier
from pets_tracker.notifications.stylers.trade_styler import TradeNotificationStyler
from pets_tracker.persistence.repositories.in_memory import (
    InMemorySubscriberRepository,
    InMemoryTradeHistoryRepository,
)
from pets_tracker.persistence.repositories.interfaces import ISubscriberRepository
from pets_tracker.services.polling import PollingRunner, PollScheduler
from pets_tracker.services.pricing import PriceOracle
from pets_tracker.services.trade_classification import TradeClassifier, build_trade_signal
from pets_tracker.services.trade_processing import TradeProcessorService


def _build_price_oracle(settings: Settings, price_client: CoinGeckoClient) -> PriceOracle:
    """Oracle over the price assets of every enabled chain."""
    return PriceOracle(
        price_client,
        sorted({chain.price_asset for chain in settings.chains}),
        refresh_seconds=settings.price.refresh_seconds,
        default_prices=settings.price.default_prices,
    )


def _build_notification_sink(settings: Settings) -> BaseNotificationStrategy:
    if settings.telegram.enabled:
        return TelegramNotifier(settings=settings)
    return ConsoleNotifier(settings=settings)


def _build_fanout(
    settings: Settings,
    subscribers: ISubscriberRepository,
    sink: BaseNotificationStrategy,
    styler: TradeNotificationStyler,
) -> NotificationFanout:
    return NotificationFanout(
        subscribers,
        sink,
        styler,
        max_concurrency=settings.fanout.max_concurrency,
    )


def _build_poll_schedulers(
    settings: Settings,
    http_client: AsyncHttpClient,
    price_oracle: PriceOracle,
    history: InMemoryTradeHistoryRepository,
    dispatcher: NotificationDispatcher,
    media: MediaCatalog,
) -> list[PollScheduler]:
    """One ChainClient -> trade signal -> classifier -> processor -> scheduler chain per enabled chain."""
    schedulers: list[PollScheduler] = []
    for chain in settings.chains:
        chain_client = ChainClient(http_client, chain)
        classifier = TradeClassifier(
            chain,
            build_trade_signal(settings.trade_signal.strategy, chain_client),
            media,
        )
        processor = TradeProcessorService(
            classifier,
            history,
            dispatcher,
            logger_name=f"TradeProcessorService.{chain.key}",
        )
        schedulers.append(
            PollScheduler(chain_client, price_oracle, processor, settings.scheduler)
        )
    return schedulers


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, HTTP client, chain pipelines, notifications and outer surfaces."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    coingecko_client = providers.Singleton(
        CoinGeckoClient,
        http_client=http_client,
        settings=config,
    )

    price_oracle = providers.Singleton(_build_price_oracle, config, coingecko_client)

    trade_history_repository = providers.Singleton(
        InMemoryTradeHistoryRepository,
        capacity=config.provided.history.capacity,
    )

    subscriber_repository = providers.Singleton(InMemorySubscriberRepository)

    media_catalog = providers.Singleton(MediaCatalog, settings=config.provided.media)

    notification_styler = providers.Singleton(TradeNotificationStyler, settings=config)

    notification_sink = providers.Singleton(_build_notification_sink, config)

    notification_fanout = providers.Singleton(
        _build_fanout,
        config,
        subscriber_repository,
        notification_sink,
        notification_styler,
    )

    notification_dispatcher = providers.Singleton(
        NotificationDispatcher,
        fanout=notification_fanout,
        sink=notification_sink,
        queue_size=config.provided.fanout.queue_size,
    )

    poll_schedulers = providers.Singleton(
        _build_poll_schedulers,
        config,
        http_client,
        price_oracle,
        trade_history_repository,
        notification_dispatcher,
        media_catalog,
    )

    polling_runner = providers.Singleton(
        PollingRunner,
        schedulers=poll_schedulers,
        shutdown_grace_seconds=config.provided.scheduler.shutdown_grace_seconds,
    )

    status_server = providers.Singleton(
        StatusServer,
        settings=config,
        history=trade_history_repository,
    )

    command_bot = providers.Singleton(
        TelegramCommandBot,
        settings=config,
        subscribers=subscriber_repository,
        history=trade_history_repository,
        styler=notification_styler,
        media=media_catalog,
        sink=notification_sink,
    )
