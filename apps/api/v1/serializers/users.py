# apps/api/v1/serializers/users.py
"""
Serializers for tenant user administration.
"""
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from users.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for tenant users.

    ``password`` is write-only and required on create. The acting user may
    only assign roles they are allowed to manage.
    """
    password = serializers.CharField(write_only=True, required=False, style={'input_type': 'password'})

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'name', 'role', 'is_active',
            'password', 'date_joined', 'last_login',
        ]
        read_only_fields = ['date_joined', 'last_login']

    def validate_role(self, value):
        actor = self.context['request'].user
        if not actor.can_manage_role(value):
            raise serializers.ValidationError(f"You cannot assign the '{value}' role.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate(self, attrs):
        actor = self.context['request'].user
        if self.instance is not None and not actor.can_manage_role(self.instance.role):
            raise serializers.ValidationError(f"You cannot manage users with the '{self.instance.role}' role.")
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': "A password is required."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(tenant=self.context['request'].tenant, **validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class CurrentUserSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source='tenant.name', read_only=True, default=None)
    can_write = serializers.BooleanField(read_only=True)
    is_manager = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'name', 'role', 'tenant', 'tenant_name',
            'is_superuser', 'can_write', 'is_manager',
        ]
        read_only_fields = fields
