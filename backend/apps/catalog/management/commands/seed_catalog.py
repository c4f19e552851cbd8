from django.core.management.base import BaseCommand

from apps.catalog.seed import seed_catalog


class Command(BaseCommand):
    help = "Seed categories, products, roles and users in one operation."

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush", action="store_true", help="Delete existing data before seeding"
        )

    def handle(self, *args, **options):
        if options["flush"]:
            self.stdout.write("Flushing existing data...")
        summary = seed_catalog(flush=options["flush"])
        self.stdout.write(
            f"Created {summary.categories} categories, {summary.products} products, "
            f"{summary.roles} roles and {summary.users} users."
        )
        self.stdout.write(self.style.SUCCESS("Catalog seed completed."))
