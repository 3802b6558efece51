from django.urls import path
from .views import *

urlpatterns = [
    path('', ProductListCreateView.as_view(), name='product-list'),
    path('categories/', ProductCategoriesView.as_view(), name='product-categories'),
    path('<uuid:pk>/', ProductDetailView.as_view(), name='product-detail'),
    path('<uuid:pk>/quantity/', ProductQuantityView.as_view(), name='product-quantity'),
]
