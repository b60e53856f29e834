"""Tier-based report redaction.

A pure read-time transform: stored reports are never modified, so a tier
upgrade shows the same reports unredacted on the next read.
"""

from __future__ import annotations

import copy
from typing import Any

from microlearn.db.models import SubscriptionTier

REDACTED_FIELDS = ("details",)
UPGRADE_PROMPT = "Upgrade to Premium to unlock the detailed breakdown of this report."


def redact(report: dict[str, Any], tier: SubscriptionTier) -> dict[str, Any]:
    """Return the view of ``report`` a user of ``tier`` may see.

    FREE: every field in REDACTED_FIELDS inside ``report_data`` becomes None
    and ``upgrade_prompt`` is attached. PREMIUM: unchanged, no prompt.
    The input is never mutated.
    """
    view = copy.deepcopy(report)
    if tier is SubscriptionTier.PREMIUM:
        view["upgrade_prompt"] = None
        return view

    data = view.get("report_data")
    if not isinstance(data, dict):
        data = {}
    for field in REDACTED_FIELDS:
        data[field] = None
    view["report_data"] = data
    view["upgrade_prompt"] = UPGRADE_PROMPT
    return view
