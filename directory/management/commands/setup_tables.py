from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from aws_config import (
    ALL_TABLES,
    KITCHENS_TABLE,
    LOCATIONS_TABLE,
    MENU_ITEMS_TABLE,
    ORDERING_LINKS_TABLE,
    PROFILES_TABLE,
    dynamodb_resource,
)
from aws_lib.dynamodb_client import DynamoDBClient

from directory.shaping import format_tags

# Sample menu for the demo kitchen
DEMO_MENU = [
    # Appetizers
    {"name": "Vegetable Samosas", "description": "Crispy pastries filled with spiced potatoes and peas",
     "category": "Appetizers", "category_sort_order": 10, "price": 5.99, "is_vegetarian": True,
     "tags": "Fried,Popular,Vegetarian"},
    {"name": "Chicken Pakora", "description": "Spiced chicken fritters fried until golden brown",
     "category": "Appetizers", "category_sort_order": 10, "price": 7.99, "is_vegetarian": False,
     "tags": "Fried,Spicy"},
    # Tandoori Specialties
    {"name": "Tandoori Chicken", "description": "Chicken marinated in yogurt and spices, roasted in the clay oven",
     "category": "Tandoori Specialties", "category_sort_order": 20, "price": 15.99, "is_vegetarian": False,
     "tags": "Popular,Spicy"},
    {"name": "Seekh Kebab", "description": "Minced lamb mixed with herbs and spices, skewered and grilled",
     "category": "Tandoori Specialties", "category_sort_order": 20, "price": 16.99, "is_vegetarian": False,
     "tags": "Grilled,Spicy"},
    # Vegetarian Curries
    {"name": "Paneer Butter Masala", "description": "Cottage cheese cubes in a rich tomato cream sauce",
     "category": "Vegetarian Curries", "category_sort_order": 30, "price": 13.99, "is_vegetarian": True,
     "tags": "Popular,Creamy,Vegetarian"},
    {"name": "Chana Masala", "description": "Chickpeas cooked with onions, tomatoes and traditional spices",
     "category": "Vegetarian Curries", "category_sort_order": 30, "price": 11.99, "is_vegetarian": True,
     "tags": "Vegetarian"},
]


class Command(BaseCommand):
    help = "Create the DynamoDB tables used by the portal, optionally with demo data."

    def add_arguments(self, parser):
        parser.add_argument("--seed", action="store_true", help="Insert a demo location, kitchen and menu.")
        parser.add_argument("--admin-email", help="Create an admin profile with this email.")
        parser.add_argument("--admin-password", help="Password for --admin-email.")

    def handle(self, *args, **options):
        ddb = dynamodb_resource()
        for table_name in ALL_TABLES:
            self.create_table(ddb, table_name)

        client = DynamoDBClient()
        if options["admin_email"]:
            self.create_admin(client, options["admin_email"], options["admin_password"])
        if options["seed"]:
            self.seed(client)

        self.stdout.write(self.style.SUCCESS("Table setup completed successfully."))

    def create_table(self, ddb, table_name, partition_key="id"):
        """Create a DynamoDB table if it doesn't exist."""
        existing = [t.name for t in ddb.tables.all()]
        if table_name in existing:
            self.stdout.write(f"Table '{table_name}' already exists.")
            return

        table = ddb.create_table(
            TableName=table_name,
            AttributeDefinitions=[{"AttributeName": partition_key, "AttributeType": "S"}],
            KeySchema=[{"AttributeName": partition_key, "KeyType": "HASH"}],
            BillingMode="PAY_PER_REQUEST"
        )
        table.wait_until_exists()
        self.stdout.write(f"Created table '{table_name}' successfully.")

    def create_admin(self, client, email, password):
        if not password:
            self.stderr.write("--admin-password is required with --admin-email")
            return
        email = email.lower()
        existing = client.single(PROFILES_TABLE, email=email)
        client.upsert(PROFILES_TABLE, {
            "id": existing.get("id"),
            "email": email,
            "password": make_password(password),
            "role": "admin",
        })
        self.stdout.write(f"Admin profile ready for {email}")

    def seed(self, client):
        if client.single(LOCATIONS_TABLE, nick_name="downtown"):
            self.stdout.write("Demo location already exists, skipping seed")
            return

        # Only one location may carry the default flag
        for other in client.query(LOCATIONS_TABLE, filters={"is_default": True}):
            client.update(LOCATIONS_TABLE, {"id": other["id"]}, {"is_default": False})

        location = client.upsert(LOCATIONS_TABLE, {
            "name": "Downtown",
            "display_name": "Downtown Kitchen Hub",
            "nick_name": "downtown",
            "address": "100 Main Street",
            "phone_number": "(407) 987-8937",
            "sort_order": 1,
            "is_default": True,
            "active_location": True,
        })
        kitchen = client.upsert(KITCHENS_TABLE, {
            "name": "Little Curry House",
            "description": "Authentic Indian cuisine with a modern twist",
            "sort_order": 1,
            "active_kitchen": True,
            "location_id": location["id"],
        })
        for item in DEMO_MENU:
            client.upsert(MENU_ITEMS_TABLE, {
                **item,
                "kitchen_id": kitchen["id"],
                "is_available": True,
                "tags": format_tags(item["tags"]),
            })
        client.upsert(ORDERING_LINKS_TABLE, {
            "kitchen_id": kitchen["id"],
            "platform_name": "UberEats",
            "url": "https://www.ubereats.com/",
        })
        self.stdout.write(f"Seeded kitchen '{kitchen['name']}' at '{location['display_name']}'")
