from django.core.management.base import BaseCommand

from apps.members.services import clean_expired_invitations


class Command(BaseCommand):
    help = 'Delete invitations whose link has expired'

    def handle(self, *args, **options):
        deleted = clean_expired_invitations()

        if deleted:
            self.stdout.write(self.style.SUCCESS(f'Removed {deleted} expired invitation(s).'))
        else:
            self.stdout.write('No expired invitations found.')
