import logging

from rest_framework import permissions
from rest_framework.generics import CreateAPIView, RetrieveAPIView
from rest_framework_simplejwt.views import TokenObtainPairView

from core.views import EnvelopeMixin
from .serializers import *

logger = logging.getLogger(__name__)


class RegisterUserView(EnvelopeMixin, CreateAPIView):
    queryset = User.objects.all()
    permission_classes = [permissions.AllowAny]
    serializer_class = UserSerializer
    success_messages = {"POST": "User registered successfully"}

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("Registered user=%s", user.pk)


class CurrentUserView(EnvelopeMixin, RetrieveAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = UserSummarySerializer

    def get_object(self):
        return self.request.user


class LoginView(TokenObtainPairView):
    serializer_class = EmailTokenObtainPairSerializer
