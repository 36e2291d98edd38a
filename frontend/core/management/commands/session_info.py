from django.core.management.base import BaseCommand

from frontend.core.session import SessionContext


class Command(BaseCommand):
    help = 'Show the stored session'

    def handle(self, *args, **options):
        snapshot = SessionContext().snapshot()
        if not snapshot.is_authenticated:
            self.stdout.write('Not logged in')
            return

        user = snapshot.user or {}
        organization = user.get('organization') or {}
        self.stdout.write(f"User: {user.get('name')} <{user.get('email')}>")
        self.stdout.write(f"Role: {user.get('role')}")
        if organization:
            self.stdout.write(f"Organization: {organization.get('name')}")
        store = snapshot.current_store
        self.stdout.write(f"Store: {store.get('name')} ({store.get('code')})" if store else 'Store: none selected')
