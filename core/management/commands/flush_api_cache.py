"""
Flush the API cache backend.

Deletes every key in the backend used by the cache store, including
parameterized statistics and post list pages that mutation hooks leave to
expire through TTL.

Usage:
    python manage.py flush_api_cache
    python manage.py flush_api_cache --alias default --noinput
"""

from django.core.management.base import BaseCommand, CommandError

from core.cache import CacheStore, CacheUnavailable


class Command(BaseCommand):
    help = 'Delete every key held by the API cache backend'

    def add_arguments(self, parser):
        parser.add_argument(
            '--alias',
            type=str,
            default=None,
            help='Django cache alias to flush. Default: QUILL_CACHE_ALIAS'
        )
        parser.add_argument(
            '--noinput',
            action='store_true',
            help='Do not prompt for confirmation'
        )

    def handle(self, *args, **options):
        store = CacheStore.from_alias(options.get('alias'))

        if not options.get('noinput'):
            answer = input('This deletes every cached entry. Continue? [y/N] ')
            if answer.strip().lower() != 'y':
                self.stdout.write(self.style.WARNING('Aborted.'))
                return

        try:
            store.flush()
        except CacheUnavailable as e:
            raise CommandError(str(e)) from e

        self.stdout.write(self.style.SUCCESS('API cache flushed.'))
