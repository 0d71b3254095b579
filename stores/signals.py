from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.text import slugify
from users.models import Merchant
from .models import Store


@receiver(post_save, sender=Merchant)
def create_default_store(sender, instance: Merchant, created: bool, **kwargs):
    """Create a default store for a merchant if none exist."""
    if not created:
        return

    if Store.objects.filter(merchant=instance).exists():
        return

    slug = slugify(instance.code) or f"store-{instance.pk}"
    if Store.objects.filter(slug=slug).exists():
        slug = f"{slug}-{instance.pk}"

    Store.objects.create(
        merchant=instance,
        slug=slug,
        name=instance.name,
        email=instance.contact_email or '',
        phone=instance.contact_phone or '',
        is_default=True,
        is_active=True,
    )
