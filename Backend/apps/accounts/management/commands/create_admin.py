"""
Management command: create_admin

Creates a course administrator, or promotes and resets an existing account.

Usage:
    python manage.py create_admin admin@example.com 's3cret!' 'Course Admin'
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

User = get_user_model()


class Command(BaseCommand):
    help = 'Create or update a course administrator account.'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('password')
        parser.add_argument('full_name')

    def handle(self, *args, **options):
        email = User.objects.normalize_email(options['email'])
        password = options['password']
        full_name = options['full_name'].strip()

        if not email:
            raise CommandError('An email address is required.')

        try:
            validate_password(password)
        except ValidationError as exc:
            raise CommandError(' '.join(exc.messages))

        user = User.objects.filter(email=email).first()

        if user is None:
            User.objects.create_superuser(email=email, password=password, full_name=full_name)
            self.stdout.write(self.style.SUCCESS(f'Admin account created: {email}'))
            return

        user.full_name = full_name
        user.role = User.ROLE_ADMIN
        user.status = User.STATUS_ACTIVE
        user.is_superuser = True
        user.invite_token_hash = None
        user.token_expires_at = None
        if user.joined_at is None:
            user.joined_at = timezone.now()
        user.set_password(password)
        user.save()

        self.stdout.write(self.style.WARNING(f'Existing account promoted to admin: {email}'))
