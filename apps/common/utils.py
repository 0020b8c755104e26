import logging
import uuid

from django.utils.text import slugify

logger = logging.getLogger(__name__)


def generate_unique_slug(instance, source_field="title", slug_field="slug"):
    """
    Generates a unique slug for a model instance.
    If a slug already exists, it appends a number.
    """
    if getattr(instance, slug_field):  # If slug is already set, assume it's intended
        return getattr(instance, slug_field)

    base_slug = slugify(getattr(instance, source_field) or "")
    if not base_slug:  # Empty title or slugify stripped everything
        base_slug = uuid.uuid4().hex[:8]

    model_class = instance.__class__
    slug = base_slug
    counter = 1
    while (
        model_class.objects.filter(**{slug_field: slug}).exclude(pk=instance.pk).exists()
    ):
        slug = f"{base_slug}-{counter}"
        counter += 1

    logger.debug(f"Generated slug '{slug}' for {model_class.__name__} {instance.pk}")
    return slug
