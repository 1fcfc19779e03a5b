# Copyright (c) 2025 Trae AI. All rights reserved.

import re
from typing import Optional
from .models import RoleKind, UploadRole

IMAGE_FIELD = "image"
VIDEO_FIELD = "video"
EPISODE_PATTERN = re.compile(r"episode_([0-9]+)")


def parse_role(field_name: str) -> Optional[UploadRole]:
    """
    Maps an upload field name to its role.

    "image" and "video" map directly; "episode_<n>" maps to an episode with
    number n (n >= 1). Any other name has no role and the part is dropped.
    """
    if not field_name:
        return None
    if field_name == IMAGE_FIELD:
        return UploadRole(kind=RoleKind.IMAGE)
    if field_name == VIDEO_FIELD:
        return UploadRole(kind=RoleKind.VIDEO)

    match = EPISODE_PATTERN.fullmatch(field_name)
    if match:
        number = int(match.group(1))
        if number > 0:
            return UploadRole(kind=RoleKind.EPISODE, number=number)
    return None
