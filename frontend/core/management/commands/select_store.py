from django.core.management.base import BaseCommand, CommandError

from frontend.core.exceptions import ClientError, user_message
from frontend.core.session import SessionContext


class Command(BaseCommand):
    help = 'Switch the active store'

    def add_arguments(self, parser):
        parser.add_argument('store_id', help='Store id, see the stores command')

    def handle(self, *args, **options):
        session = SessionContext()
        if not session.is_authenticated:
            raise CommandError('Not logged in')
        try:
            if not session.available_stores:
                session.fetch_available_stores()
            store = session.select_store_by_id(options['store_id'])
        except ClientError as e:
            raise CommandError(user_message(e, 'Could not select store'))

        self.stdout.write(self.style.SUCCESS(f"Current store: {store.get('name')} ({store.get('code')})"))
