import json
import logging
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from catalog.models import Product
from catalog.records import to_decimal, to_int
from stores.utils import get_default_store
from suppliers.models import Supplier
from users.models import Merchant

logger = logging.getLogger(__name__)

# Export field name -> document field name
PRODUCT_FIELDS = {
    'nombre': 'name',
    'descripcion': 'description',
    'precioVenta': 'sale_price',
    'precio': 'price',
    'stockMinimo': 'minimum_stock',
    'categoria': 'category',
    'tipo': 'type',
    'proveedor': 'supplier',
    'imagenes': 'images',
    'imagen': 'image',
    'destacado': 'featured',
    'activo': 'active',
    'codigo': 'code',
}

SUPPLIER_FIELDS = {
    'nombre': 'name',
    'contacto': 'contact_person',
    'telefono': 'phone',
    'direccion': 'address',
}

STORE_FIELDS = {
    'nombre': 'name',
    'descripcion': 'description',
    'telefono': 'phone',
    'direccion': 'address',
    'horarios': 'hours',
    'redesSociales': 'social_links',
}

STORE_CONFIG_FIELDS = [
    'name', 'description', 'phone', 'whatsapp', 'email',
    'address', 'hours', 'logo', 'social_links'
]

SUPPLIER_MODEL_FIELDS = ['name', 'contact_person', 'phone', 'email', 'address']


def translate(record, field_map):
    return {field_map.get(name, name): value for name, value in (record or {}).items()}


def first_section(data, *names):
    for name in names:
        if name in data:
            return data[name] or {}
    return {}


def product_defaults(record, suppliers):
    """Model values for one exported product; aliased fields are stored as-is"""
    supplier_key = record.get('supplier')
    return {
        'name': record.get('name') or '',
        'description': record.get('description') or '',
        'code': record.get('code') or '',
        'sale_price': to_decimal(record['sale_price']) if record.get('sale_price') is not None else None,
        'legacy_price': to_decimal(record['price']) if record.get('price') is not None else None,
        'stock': max(to_int(record.get('stock')), 0),
        'minimum_stock': to_int(record.get('minimum_stock'), default=None),
        'category': record.get('category') or '',
        'legacy_type': record.get('type') or '',
        'supplier': suppliers.get(supplier_key) if supplier_key else None,
        'images': [url for url in (record.get('images') or []) if url],
        'legacy_image': record.get('image') or '',
        'featured': bool(record.get('featured')),
        'active': record.get('active') if isinstance(record.get('active'), bool) else None,
    }


class Command(BaseCommand):
    help = 'Import a JSON export of a legacy store (config, products, suppliers) into a merchant store'

    def add_arguments(self, parser):
        parser.add_argument('path', help='Path to the JSON export')
        parser.add_argument('--merchant', required=True, help='Code of the merchant to import into')
        parser.add_argument('--source-id', help='Store/user id inside the export; optional when there is only one')

    def handle(self, *args, **options):
        try:
            merchant = Merchant.objects.get(code=options['merchant'])
        except Merchant.DoesNotExist:
            raise CommandError(f"Merchant {options['merchant']} does not exist")

        store = get_default_store(merchant)
        if store is None:
            raise CommandError(f"Merchant {merchant.code} has no store")

        try:
            with open(options['path'], encoding='utf-8') as export_file:
                data = json.load(export_file)
        except (OSError, ValueError) as e:
            raise CommandError(f"Could not read export: {e}")

        stores = first_section(data, 'tiendas', 'stores')
        users = first_section(data, 'usuarios', 'users')
        source_id = options.get('source_id') or self.pick_source_id(stores, users)

        store_data = stores.get(source_id) or {}
        user_data = users.get(source_id) or {}

        with transaction.atomic():
            self.import_config(store, first_section(store_data, 'config'))
            suppliers = self.import_suppliers(merchant, first_section(user_data, 'proveedores', 'suppliers'))
            created, updated = self.import_products(
                store, first_section(store_data, 'productos', 'products'), suppliers
            )

        logger.info(f"Imported export {source_id} into store {store.slug}: {created} created, {updated} updated")
        self.stdout.write(self.style.SUCCESS(
            f'Imported {len(suppliers)} suppliers, {created} new and {updated} updated products into {store.slug}'
        ))

    def pick_source_id(self, stores, users):
        ids = list(dict.fromkeys(list(stores) + list(users)))
        if len(ids) != 1:
            raise CommandError('The export holds several stores; pass --source-id')
        return ids[0]

    def import_config(self, store, config):
        values = translate(config, STORE_FIELDS)
        changed = []
        for field in STORE_CONFIG_FIELDS:
            if values.get(field) is not None:
                setattr(store, field, values[field])
                changed.append(field)
        if changed:
            store.save(update_fields=changed + ['updated_at'])
            self.stdout.write(f'  Updated store config: {", ".join(changed)}')

    def import_suppliers(self, merchant, records):
        suppliers = {}
        for key, record in records.items():
            values = translate(record, SUPPLIER_FIELDS)
            supplier, _ = Supplier.objects.update_or_create(
                merchant=merchant,
                key=key,
                defaults={field: values.get(field) or '' for field in SUPPLIER_MODEL_FIELDS}
            )
            suppliers[key] = supplier
        return suppliers

    def import_products(self, store, records, suppliers):
        created = updated = 0
        for key, record in records.items():
            _, was_created = Product.objects.update_or_create(
                store=store,
                key=key,
                defaults=product_defaults(translate(record, PRODUCT_FIELDS), suppliers)
            )
            if was_created:
                created += 1
            else:
                updated += 1
        return created, updated
