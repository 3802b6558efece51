from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from rest_framework import permissions, status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView


class EnvelopeMixin:
    """Wrap successful payloads as {"success": true, "message": ..., "data": ...}."""

    success_messages = {}

    def finalize_response(self, request, response, *args, **kwargs):
        already_wrapped = isinstance(response.data, dict) and "success" in response.data
        if isinstance(response, Response) and response.status_code < 400 and not already_wrapped:
            body = {"success": True}
            message = self.success_messages.get(request.method)
            if message:
                body["message"] = message
            if response.data is not None:
                body["data"] = response.data
            response.data = body
        return super().finalize_response(request, response, *args, **kwargs)


class ResourceDetailMixin(EnvelopeMixin):
    # PUT merges like PATCH; clients send only the fields they change.
    def update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response(status=status.HTTP_200_OK)


class ListQueryMixin:
    """
    Query-string filtering shared by the list endpoints.

    ``?<param>=value`` for each entry of ``filter_params`` ("all" disables it),
    ``?search=`` case-insensitive over ``search_fields``, and
    ``?sort_by=&sort_order=asc|desc`` restricted to ``sort_fields``.
    """

    filter_params = {}
    search_fields = ()
    sort_fields = ("created_at",)
    default_sort = "created_at"
    default_order = "desc"

    def filter_queryset(self, queryset):
        params = self.request.query_params

        for param, lookup in self.filter_params.items():
            value = params.get(param)
            if value and value != "all":
                try:
                    queryset = queryset.filter(**{lookup: value})
                except DjangoValidationError as exc:
                    raise ValidationError({param: exc.messages})

        search = (params.get("search") or "").strip()
        if search and self.search_fields:
            query = Q()
            for field in self.search_fields:
                query |= Q(**{f"{field}__icontains": search})
            queryset = queryset.filter(query)

        sort_by = params.get("sort_by") or self.default_sort
        if sort_by not in self.sort_fields:
            sort_by = self.default_sort
        sort_order = params.get("sort_order") or self.default_order
        prefix = "-" if sort_order == "desc" else ""
        return queryset.order_by(f"{prefix}{sort_by}", "-pk" if prefix else "pk")


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response(
            {
                "success": True,
                "message": "Shipment Backend API is running",
                "version": "1.0.0",
            }
        )
