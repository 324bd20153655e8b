from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class RequestPagination(PageNumberPagination):
    """``?page=`` / ``?per_page=`` paging for request lists, newest first."""

    page_size_query_param = "per_page"
    max_page_size = 100

    def get_paginated_response(self, data) -> Response:
        page = self.page
        return Response(
            {
                "data": data,
                "current_page": page.number,
                "last_page": page.paginator.num_pages,
                "per_page": page.paginator.per_page,
                "total": page.paginator.count,
            }
        )
