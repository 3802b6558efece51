import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import permissions
from rest_framework.generics import ListCreateAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import unique_fields
from core.views import EnvelopeMixin, ListQueryMixin, ResourceDetailMixin
from inventory.services import InventoryService
from .models import Product
from .serializers import ProductQuantitySerializer, ProductSerializer

logger = logging.getLogger(__name__)


class ProductListCreateView(ListQueryMixin, EnvelopeMixin, ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    queryset = Product.objects.select_related("created_by").all()
    serializer_class = ProductSerializer
    success_messages = {"POST": "Product created successfully"}
    filter_params = {"category": "category", "status": "status"}
    search_fields = ("name", "sku", "description")
    sort_fields = ("created_at", "updated_at", "name", "sku", "category", "price", "cost", "quantity")

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        stock_status = self.request.query_params.get("stock_status")
        if stock_status and stock_status != "all":
            queryset = queryset.with_stock_status(stock_status)
        return queryset

    def perform_create(self, serializer):
        with unique_fields("sku"), transaction.atomic():
            product = serializer.save(created_by=self.request.user)
            InventoryService.record_movement(product, product.quantity, "Initial Stock", user=self.request.user)
        logger.info("Created product=%s sku=%s", product.pk, product.sku)


class ProductDetailView(ResourceDetailMixin, RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated]
    queryset = Product.objects.select_related("created_by").all()
    serializer_class = ProductSerializer
    success_messages = {
        "PUT": "Product updated successfully",
        "PATCH": "Product updated successfully",
        "DELETE": "Product deleted successfully",
    }

    def perform_update(self, serializer):
        previous_quantity = serializer.instance.quantity
        with unique_fields("sku"), transaction.atomic():
            product = serializer.save()
            InventoryService.record_movement(
                product, product.quantity - previous_quantity, "Manual Adjustment", user=self.request.user
            )

    def perform_destroy(self, instance):
        logger.info("Deleting product=%s sku=%s", instance.pk, instance.sku)
        instance.delete()


class ProductQuantityView(EnvelopeMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]
    success_messages = {"PATCH": "Product quantity updated successfully"}

    def patch(self, request, pk):
        product = get_object_or_404(Product, pk=pk)
        serializer = ProductQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = InventoryService.update_quantity(
            product,
            serializer.validated_data["quantity"],
            serializer.validated_data["operation"],
            user=request.user,
        )
        return Response(ProductSerializer(product).data)


class ProductCategoriesView(EnvelopeMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        categories = (
            Product.objects.order_by("category").values_list("category", flat=True).distinct()
        )
        return Response(list(categories))
