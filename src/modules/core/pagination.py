"""Standard page-number pagination shared by every list endpoint."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=N&page_size=M`` with ``page_size`` capped at 100."""

    page_size_query_param = "page_size"
    max_page_size = 100
