"""
WhatsApp hand-off links (https://wa.me/...).
"""
import re
from urllib.parse import quote

WHATSAPP_BASE_URL = 'https://wa.me/'

# Same set encodeURIComponent leaves alone
_SAFE_CHARS = "-_.!~*'()"


def phone_digits(phone):
    return re.sub(r'\D', '', phone or '')


def encode_message(text):
    return quote(text, safe=_SAFE_CHARS)


def format_price(price):
    return f"{price:.2f}"


def checkout_message(product):
    return (
        "Hi! I'd like to buy:\n\n"
        f"*{product.name}*\n"
        f"{product.description}\n\n"
        f"Price: ${format_price(product.price)}\n"
        f"Available stock: {product.stock} units\n\n"
        "Is it still available?"
    )


def build_checkout_url(phone, product):
    """Link that opens a chat with the store about one product, or None without a number"""
    digits = phone_digits(phone)
    if not digits:
        return None
    return f"{WHATSAPP_BASE_URL}{digits}?text={encode_message(checkout_message(product))}"


def share_message(store, catalog_url):
    return (
        f"Hi! Take a look at the {store.name} catalog:\n\n"
        f"{store.description}\n\n"
        f"See the products: {catalog_url}\n\n"
        f"Contact: {store.contact_number}"
    )


def build_share_url(store, catalog_url):
    """Recipient-less link for forwarding the catalog to anybody"""
    return f"{WHATSAPP_BASE_URL}?text={encode_message(share_message(store, catalog_url))}"
