from rest_framework.serializers import ModelSerializer
from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
User = get_user_model()


class UserSummarySerializer(ModelSerializer):
    name = serializers.CharField(source="first_name", read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields


class UserSerializer(ModelSerializer):
    name = serializers.CharField(source="first_name", max_length=50)
    email = serializers.EmailField()

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'date_joined', 'password']
        extra_kwargs = {
            'password': {'write_only': True, 'min_length': 6},}
        read_only_fields = ('id', 'date_joined')

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required and should be between 1-50 characters")
        return value

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User already exists with this email")
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        email = validated_data['email']
        # Login goes through the username field, so it mirrors the email.
        return User.objects.create_user(username=email, password=password, **validated_data)


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token pair login that takes ``{email, password}``."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        del self.fields[self.username_field]
        self.fields['email'] = serializers.EmailField()

    def validate(self, attrs):
        # Usernames mirror the lower-cased email given at registration.
        attrs[self.username_field] = attrs.pop('email').strip().lower()
        return super().validate(attrs)
