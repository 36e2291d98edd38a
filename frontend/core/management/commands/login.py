"""
Management command to log in and remember the session on this machine.
"""
from getpass import getpass

from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import ValidationError

from frontend.core.exceptions import ClientError, user_message
from frontend.core.session import SessionContext


class Command(BaseCommand):
    help = 'Log in to the billing API and persist the token, user and store'

    def add_arguments(self, parser):
        parser.add_argument('--email', help='Account email')
        parser.add_argument('--password', help='Account password (prompted when omitted)')

    def handle(self, *args, **options):
        email = options['email'] or input('Email: ')
        password = options['password'] or getpass('Password: ')

        session = SessionContext()
        try:
            snapshot = session.login(email, password)
        except (ClientError, ValidationError) as e:
            raise CommandError(user_message(e, 'Login failed'))

        user = snapshot.user or {}
        self.stdout.write(self.style.SUCCESS(f"Logged in as {user.get('name')} <{user.get('email')}>"))
        self.stdout.write(f"Role: {user.get('role')}")
        if snapshot.current_store:
            self.stdout.write(f"Store: {snapshot.current_store.get('name')} ({snapshot.current_store.get('code')})")
        elif snapshot.available_stores:
            self.stdout.write(self.style.WARNING('No store selected, run select_store <id>'))
