"""Video attached to an alert, chosen by size category."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pets_tracker.models.trade_record import SizeCategory

if TYPE_CHECKING:
    from pets_tracker.config import MediaSettings

_PLACEHOLDERS: dict[SizeCategory, str] = {
    SizeCategory.SMALL: "[Small Buy Video]",
    SizeCategory.MEDIUM: "[Medium Buy Video]",
    SizeCategory.WHALE: "[Large Buy Video]",
}


class MediaCatalog:
    """Map a SizeCategory to its Cloudinary video URL and a text placeholder."""

    def __init__(self, settings: MediaSettings) -> None:
        self._cloud_name = settings.cloud_name
        self._video_ids: dict[SizeCategory, str] = {
            SizeCategory.SMALL: settings.small_video_id,
            SizeCategory.MEDIUM: settings.medium_video_id,
            SizeCategory.WHALE: settings.whale_video_id,
        }

    def url_for(self, category: SizeCategory) -> str:
        public_id = self._video_ids.get(category) or "default"
        return f"https://res.cloudinary.com/{self._cloud_name}/video/upload/{public_id}.mp4"

    @staticmethod
    def placeholder_for(category: SizeCategory) -> str:
        return _PLACEHOLDERS.get(category, "[Video]")
