from django.core.management.base import BaseCommand

from frontend.core.session import SessionContext


class Command(BaseCommand):
    help = 'Forget the stored session'

    def handle(self, *args, **options):
        SessionContext().logout()
        self.stdout.write(self.style.SUCCESS('Logged out'))
