# aws_config.py
import os

import boto3
from botocore.config import Config

# -----------------------------
# AWS region & boto3 config
# -----------------------------
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

# Point at DynamoDB Local (or any compatible endpoint) when set
DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL") or None

boto3_config = Config(
    region_name=AWS_REGION,
    retries={"max_attempts": 3, "mode": "standard"}
)

# -----------------------------
# DynamoDB table names
# -----------------------------
KITCHENS_TABLE = os.getenv("DDB_KITCHENS_TABLE", "kitchens")
MENU_ITEMS_TABLE = os.getenv("DDB_MENU_ITEMS_TABLE", "menu_items")
ORDERING_LINKS_TABLE = os.getenv("DDB_ORDERING_LINKS_TABLE", "ordering_links")
LOCATIONS_TABLE = os.getenv("DDB_LOCATIONS_TABLE", "locations")
PROFILES_TABLE = os.getenv("DDB_PROFILES_TABLE", "profiles")

ALL_TABLES = [
    KITCHENS_TABLE,
    MENU_ITEMS_TABLE,
    ORDERING_LINKS_TABLE,
    LOCATIONS_TABLE,
    PROFILES_TABLE,
]


# -----------------------------
# AWS clients/resources
# -----------------------------
def dynamodb_resource():
    return boto3.resource(
        "dynamodb",
        region_name=AWS_REGION,
        endpoint_url=DYNAMODB_ENDPOINT_URL,
        config=boto3_config,
    )
