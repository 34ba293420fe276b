from django.core.management.base import BaseCommand, CommandError

from apps.collections.exceptions import CollectionNotFound
from apps.collections.models import Collection, CollectionRule
from apps.collections.services import CollectionService


class Command(BaseCommand):
    help = 'Regenerate automatic collection memberships (flagged collections by default)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--batch-size',
            type=int,
            help='Number of flagged collections to process (1-50, default from settings)',
        )
        parser.add_argument(
            '--all',
            action='store_true',
            help='Regenerate every collection that has rules, flagged or not',
        )
        parser.add_argument(
            '--collection',
            type=int,
            help='Regenerate a single collection by id',
        )

    def handle(self, *args, **options):
        if options['collection'] is not None:
            self.regenerate_one(options['collection'])
        elif options['all']:
            self.regenerate_all()
        else:
            self.process_pending(options['batch_size'])

    def regenerate_one(self, collection_id):
        try:
            result = CollectionService.regenerate(collection_id)
        except CollectionNotFound as e:
            raise CommandError(str(e))
        self.stdout.write(self.style.SUCCESS(
            f'Collection {collection_id}: {result.matched} matched, '
            f'{result.added} added, {result.removed} removed, {result.manual} manual'
        ))

    def regenerate_all(self):
        collection_ids = Collection.objects.filter(
            pk__in=CollectionRule.objects.values('collection_id')
        ).order_by('pk').values_list('pk', flat=True)

        count = 0
        for collection_id in collection_ids:
            result = CollectionService.regenerate(collection_id)
            self.stdout.write(
                f'  Collection {collection_id}: {result.matched} matched, '
                f'{result.added} added, {result.removed} removed'
            )
            count += 1
        self.stdout.write(self.style.SUCCESS(f'Regenerated {count} collections'))

    def process_pending(self, batch_size):
        result = CollectionService.process_pending_regenerations(batch_size)
        for error in result['errors']:
            self.stderr.write(self.style.ERROR(
                f"  Collection {error['collection_id']}: {error['error']}"
            ))
        style = self.style.WARNING if result['failed'] else self.style.SUCCESS
        self.stdout.write(style(
            f"Processed {result['processed']}, failed {result['failed']}, "
            f"remaining {result['remaining']}"
        ))
