from django.db.models import F, Value
from django.db.models.functions import Coalesce

LOW_LEVEL_LIMIT = 5

STATUS_AVAILABLE = 'available'
STATUS_LOW = 'low'

LEVEL_OUT = 'out'
LEVEL_LOW = 'low'
LEVEL_NORMAL = 'normal'


def with_minimum(queryset):
    """Annotate the minimum stock, missing minimums counting as 0"""
    return queryset.annotate(minimum_value=Coalesce('minimum_stock', Value(0)))


def filter_by_status(queryset, stock_status):
    if stock_status == STATUS_AVAILABLE:
        return with_minimum(queryset).filter(stock__gt=F('minimum_value'))
    if stock_status == STATUS_LOW:
        return with_minimum(queryset).filter(stock__lte=F('minimum_value'))
    return queryset


def filter_by_level(queryset, level):
    if level == LEVEL_OUT:
        return queryset.filter(stock=0)
    if level == LEVEL_LOW:
        return queryset.filter(stock__gte=1, stock__lte=LOW_LEVEL_LIMIT)
    if level == LEVEL_NORMAL:
        return queryset.filter(stock__gt=LOW_LEVEL_LIMIT)
    return queryset


def low_stock_queryset(queryset):
    """Active products at or below their minimum stock"""
    return filter_by_status(queryset, STATUS_LOW).exclude(active=False)


def stock_level(stock):
    if stock == 0:
        return LEVEL_OUT
    if stock <= LOW_LEVEL_LIMIT:
        return LEVEL_LOW
    return LEVEL_NORMAL
