# -*- coding: utf-8 -*-
"""Unit tests for MediaCatalog."""

from __future__ import annotations

from pets_tracker.config import Settings
from pets_tracker.models.trade_record import SizeCategory
from pets_tracker.notifications.media import MediaCatalog


def test_url_per_category(settings: Settings) -> None:
    catalog = MediaCatalog(settings.media)

    assert catalog.url_for(SizeCategory.SMALL) == (
        "https://res.cloudinary.com/da4k3yxhu/video/upload/SMALLBUY_b3px1p.mp4"
    )
    assert catalog.url_for(SizeCategory.MEDIUM).endswith("/MEDIUMBUY_MPEG_e02zdz.mp4")
    assert catalog.url_for(SizeCategory.WHALE).endswith("/micropets_big_msapxz.mp4")


def test_missing_video_id_uses_default(settings: Settings) -> None:
    catalog = MediaCatalog(settings.media.model_copy(update={"whale_video_id": ""}))

    assert catalog.url_for(SizeCategory.WHALE).endswith("/video/upload/default.mp4")


def test_placeholders() -> None:
    assert MediaCatalog.placeholder_for(SizeCategory.SMALL) == "[Small Buy Video]"
    assert MediaCatalog.placeholder_for(SizeCategory.MEDIUM) == "[Medium Buy Video]"
    assert MediaCatalog.placeholder_for(SizeCategory.WHALE) == "[Large Buy Video]"
