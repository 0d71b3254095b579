"""
Celery tasks for stock alerts.
"""
import logging
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from catalog.models import Product
from stores.models import Store
from .utils import low_stock_queryset

logger = logging.getLogger(__name__)


def alert_recipient(store):
    return store.merchant.contact_email or store.email


def low_stock_message(store, products):
    lines = [f"The following products of {store.name} are running low:", ""]
    for product in products:
        lines.append(f"- {product.name} ({product.code or product.key}): {product.stock} left, minimum {product.minimum_stock or 0}")
    return "\n".join(lines)


@shared_task
def check_low_stock():
    """
    Email every active store's merchant the products at or below their minimum stock.

    Returns:
        dict: stores checked, alerts sent and low-stock products per store slug
    """
    summary = {'stores_checked': 0, 'alerts_sent': 0, 'low_stock': {}}

    stores = Store.objects.select_related('merchant').filter(is_active=True, merchant__is_active=True)
    for store in stores:
        summary['stores_checked'] += 1
        products = list(low_stock_queryset(Product.objects.filter(store=store)).order_by('id'))
        if not products:
            continue

        summary['low_stock'][store.slug] = [product.key for product in products]
        recipient = alert_recipient(store)
        if not recipient:
            logger.warning(f"Store {store.slug} has {len(products)} low-stock products but no contact email")
            continue

        try:
            send_mail(
                subject=f"Low stock alert: {store.name}",
                message=low_stock_message(store, products),
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient],
            )
        except Exception as e:
            logger.error(f"Failed to send low stock alert for store {store.slug}: {e}")
            continue

        summary['alerts_sent'] += 1

    logger.info(
        f"Low stock check: {summary['stores_checked']} stores checked, {summary['alerts_sent']} alerts sent"
    )
    return summary
