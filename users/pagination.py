from django.conf import settings
from rest_framework.pagination import PageNumberPagination


class AdminPagination(PageNumberPagination):
    """Fixed-size pages for admin list views"""
    page_size = settings.ADMIN_PAGE_SIZE
    page_size_query_param = 'page_size'
    max_page_size = 100
