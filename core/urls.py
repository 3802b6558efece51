from django.contrib import admin
from django.urls import path, include

from .views import HealthView


urlpatterns = [
    path("", HealthView.as_view(), name="health"),
    path("admin/", admin.site.urls),
    path('api/auth/', include('account.urls')),
    path('api/products/', include('catalog.urls')),
    path('api/', include('courier.urls')),
    path('api/dashboard/', include('dashboard.urls')),
]
