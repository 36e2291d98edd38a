"""
Form serializers for authentication and user management.

These run before any request is sent; invalid input raises
rest_framework.exceptions.ValidationError with the message shown to the user.
"""
from rest_framework import serializers

from frontend.locations.serializers import StoreFormSerializer

ROLE_CHOICES = [
    ('store_worker', 'Store Worker'),
    ('store_manager', 'Store Manager'),
    ('org_admin', 'Organization Admin'),
]

MIN_PASSWORD_LENGTH = 8


def _without_blanks(data):
    return {k: v for k, v in data.items() if v not in (None, '')}


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(trim_whitespace=True)
    password = serializers.CharField(trim_whitespace=False)


class UserFormSerializer(serializers.Serializer):
    """
    New/edit user form.

    Pass context={'editing': True} for the edit form, where a blank password
    keeps the existing one.
    """
    name = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=ROLE_CHOICES, default='store_worker')
    store_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    active = serializers.BooleanField(default=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default='')
    confirm_password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default='')

    def validate(self, attrs):
        editing = self.context.get('editing', False)
        password = attrs.get('password', '')

        if password or not editing:
            if len(password) < MIN_PASSWORD_LENGTH:
                raise serializers.ValidationError(
                    {'password': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'}
                )
            if password != attrs.get('confirm_password', ''):
                raise serializers.ValidationError({'confirm_password': 'Passwords do not match'})

        role = attrs.get('role')
        store_id = attrs.get('store_id')
        if role in ('store_worker', 'store_manager') and not store_id:
            raise serializers.ValidationError(
                {'store_id': 'Store workers and managers must be assigned to a store'}
            )
        if role == 'org_admin' and store_id:
            raise serializers.ValidationError(
                {'store_id': 'Organization admins cannot be assigned to a store'}
            )
        return attrs

    def to_payload(self):
        data = dict(self.validated_data)
        data.pop('confirm_password', None)
        if not data.get('password'):
            data.pop('password', None)
        return _without_blanks(data)


class OrganizationFormSerializer(serializers.Serializer):
    name = serializers.CharField(error_messages={'blank': 'Organization name is required'})
    phone = serializers.CharField(required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')


class OnboardingUserSerializer(serializers.Serializer):
    name = serializers.CharField(error_messages={'blank': 'All user fields are required'})
    email = serializers.EmailField(error_messages={'blank': 'All user fields are required'})
    password = serializers.CharField(trim_whitespace=False, error_messages={'blank': 'All user fields are required'})
    confirm_password = serializers.CharField(trim_whitespace=False, required=False, allow_blank=True, default='')
    phone = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if len(attrs['password']) < MIN_PASSWORD_LENGTH:
            raise serializers.ValidationError(
                {'password': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'}
            )
        if attrs['password'] != attrs.get('confirm_password', ''):
            raise serializers.ValidationError({'confirm_password': 'Passwords do not match'})
        return attrs


class OnboardingSerializer(serializers.Serializer):
    """Organization, first store and admin user in one submission"""
    organization = OrganizationFormSerializer()
    store = StoreFormSerializer()
    user = OnboardingUserSerializer()

    def to_form_data(self):
        """Flatten to `organization[name]`-style multipart fields, blanks omitted"""
        form_data = {}
        for section in ('organization', 'store', 'user'):
            values = dict(self.validated_data[section])
            values.pop('confirm_password', None)
            for key, value in _without_blanks(values).items():
                form_data[f'{section}[{key}]'] = value
        return form_data
