from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from inventory import ledger
from inventory.models import MenuItem, Inventory


class Command(BaseCommand):
    help = 'Create missing inventory records and recompute menu item availability'

    def add_arguments(self, parser):
        parser.add_argument(
            '--quantity', type=int, default=settings.INVENTORY_SYNC_DEFAULT_QUANTITY,
            help='Starting quantity for newly created records',
        )
        parser.add_argument(
            '--threshold', type=int, default=settings.INVENTORY_SYNC_DEFAULT_THRESHOLD,
            help='Low stock threshold for newly created records',
        )
        parser.add_argument(
            '--unit', default=settings.INVENTORY_SYNC_DEFAULT_UNIT,
            help='Unit for newly created records',
        )

    def handle(self, *args, **options):
        created = 0
        existing = 0

        with transaction.atomic():
            for menu_item in MenuItem.objects.order_by('pk'):
                inventory = Inventory.objects.filter(menu_item=menu_item).first()
                if inventory is None:
                    ledger.create(
                        menu_item,
                        quantity=options['quantity'],
                        low_stock_threshold=options['threshold'],
                        unit=options['unit'],
                    )
                    created += 1
                else:
                    ledger.sync_availability(menu_item.pk, inventory.quantity)
                    existing += 1

        self.stdout.write(self.style.SUCCESS(
            f'Inventory sync complete: {created} created, {existing} existing'
        ))
