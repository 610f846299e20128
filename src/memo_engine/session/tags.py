"""Default ``#tag`` extraction used after saves."""

from __future__ import annotations

import re
from typing import List

TAG_PATTERN = re.compile(r"(?:^|(?<=\s))#([^\s#,]+)")


def extract_tags(text: str) -> List[str]:
    """Unique tag names in order of first appearance, without the ``#``."""

    return list(dict.fromkeys(TAG_PATTERN.findall(text)))
