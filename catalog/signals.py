from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from stores.utils import bump_catalog_version
from .models import Product


@receiver(post_save, sender=Product)
@receiver(post_delete, sender=Product)
def product_changed(sender, instance: Product, **kwargs):
    """Any product write makes previously served snapshots stale."""
    bump_catalog_version(instance.store_id)
