"""Upsert-or-create resolution of free-text category names.

A product write may name a category that does not exist yet ("Other" plus a
custom name in the admin form). Resolution turns the raw name into a
canonical ``Category``:

1. Format the name to Title Case with single spaces.
2. Derive a slug from the formatted name.
3. Reuse a category matching the slug or the name (case-insensitive),
   reactivating it and filling a missing target gender.
4. Otherwise create one, suffixing the slug (``base-1``, ``base-2``...) until
   it is free.
"""

import re
import uuid

from protean.utils.globals import current_domain

from storefront.category.category import Category
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def format_category_name(value) -> str:
    words = str(value or "").split()
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def slugify_category(value) -> str:
    slug = str(value or "").strip().lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def ensure_unique_slug(base_slug: str, is_taken) -> str:
    """Return ``base_slug`` or the first ``base_slug-N`` for which ``is_taken`` is false."""
    base = base_slug or f"category-{uuid.uuid4().hex[:8]}"
    slug = base
    suffix = 1
    while is_taken(slug):
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


def resolve_category(raw_name, target_gender=None) -> Category:
    repo = current_domain.repository_for(Category)

    name = format_category_name(raw_name)
    slug_candidate = slugify_category(name)

    existing = repo.get_by_slug(slug_candidate) or repo.find_by_name(name)
    if existing is not None:
        changed = False
        if not existing.is_active:
            existing.reactivate()
            changed = True
        if target_gender and not existing.target_gender:
            existing.assign_target_gender(target_gender)
            changed = True
        if changed:
            repo.add(existing)
            logger.info("Category revived", category_id=str(existing.id), slug=existing.slug)
        return existing

    category = Category.create(
        name=name,
        slug=ensure_unique_slug(slug_candidate, repo.slug_taken),
        target_gender=target_gender,
    )
    repo.add(category)
    logger.info("Category created", category_id=str(category.id), slug=category.slug)
    return category
