# Copyright (c) 2025 Trae AI. All rights reserved.

import time
from typing import Callable, Mapping, Optional, Sequence
from .models import (
    EntryBase,
    Episode,
    MovieEntry,
    RoleKind,
    SeriesEntry,
    StoredAsset,
)

SERIES_TYPE = "series"


class ItemBuilder:
    """
    Assembles a catalog entry from submitted form fields and the assets
    stored for the same request.
    """

    def __init__(self, episode_title_template: str = "Episode {number}", clock: Callable[[], float] = time.time):
        self.episode_title_template = episode_title_template
        self.clock = clock

    def build(self, fields: Mapping[str, Optional[str]], assets: Sequence[StoredAsset]) -> EntryBase:
        image = self._first_url(assets, RoleKind.IMAGE)
        common = {
            "id": int(self.clock() * 1000),
            "title": fields.get("title"),
            "category": fields.get("category"),
            "image": image,
        }

        if fields.get("type") == SERIES_TYPE:
            episodes = [
                Episode(
                    number=asset.role.number,
                    url=asset.url,
                    title=self.episode_title_template.format(number=asset.role.number),
                )
                for asset in assets
                if asset.role.kind == RoleKind.EPISODE
            ]
            # sorted() is stable, duplicate numbers keep upload order
            episodes = sorted(episodes, key=lambda ep: ep.number)
            return SeriesEntry(episodes=episodes, **common)

        return MovieEntry(video_url=self._first_url(assets, RoleKind.VIDEO), **common)

    @staticmethod
    def _first_url(assets: Sequence[StoredAsset], kind: RoleKind) -> str:
        for asset in assets:
            if asset.role.kind == kind:
                return asset.url
        return ""
