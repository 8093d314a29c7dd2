from __future__ import annotations

import re

from ..extensions import db


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")
    return slug or "item"


def unique_slug(model, name: str, *, exclude_id: int | None = None) -> str:
    """slugify(name), suffixed -2, -3, ... until unused in model's table."""
    base = slugify(name)
    candidate = base
    n = 2
    while True:
        query = db.session.query(model.id).filter(model.slug == candidate)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if not query.first():
            return candidate
        candidate = f"{base}-{n}"
        n += 1
