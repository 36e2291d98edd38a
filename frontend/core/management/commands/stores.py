from django.core.management.base import BaseCommand, CommandError

from frontend.core.exceptions import ClientError, user_message
from frontend.core.session import SessionContext


class Command(BaseCommand):
    help = 'List the stores available to the logged-in user (* marks the current one)'

    def handle(self, *args, **options):
        session = SessionContext()
        if not session.is_authenticated:
            raise CommandError('Not logged in')
        try:
            stores = session.fetch_available_stores()
        except ClientError as e:
            raise CommandError(user_message(e, 'Failed to load stores'))

        if not stores:
            self.stdout.write(self.style.WARNING('No stores available'))
            return

        current_id = session.current_store_id
        for store in stores:
            marker = '*' if store.get('id') == current_id else ' '
            self.stdout.write(f"{marker} {str(store.get('id')):>5}  {str(store.get('code') or ''):<12} {store.get('name')}")
