"""
Tests for the admin console: role checks and record management.
"""

import pytest

from aws_config import (
    KITCHENS_TABLE,
    LOCATIONS_TABLE,
    MENU_ITEMS_TABLE,
    ORDERING_LINKS_TABLE,
    PROFILES_TABLE,
)
from directory.forms import NEW_CATEGORY


@pytest.fixture
def kitchen(gateway):
    gateway.put(LOCATIONS_TABLE, {"id": "loc-1", "name": "Downtown", "address": "1 Main St"})
    gateway.put(KITCHENS_TABLE, {"id": "k1", "name": "Curry House", "sort_order": 1, "location_id": "loc-1"})
    gateway.put(MENU_ITEMS_TABLE, {
        "id": "m1", "kitchen_id": "k1", "name": "Samosa", "category": "Appetizers",
        "category_sort_order": 10, "price": 5.99,
    })
    gateway.put(ORDERING_LINKS_TABLE, {
        "id": "o1", "kitchen_id": "k1", "platform_name": "UberEats", "url": "https://ubereats.com/curry",
    })
    return gateway.get(KITCHENS_TABLE, {"id": "k1"})


class TestAdminAccess:
    """Every admin page checks the role in the profiles table."""

    @pytest.mark.parametrize("path", [
        "/admin/kitchens/",
        "/admin/kitchens/k1/",
        "/admin/kitchens/k1/menu/",
        "/admin/kitchens/k1/links/",
        "/admin/locations/",
    ])
    def test_anonymous_redirected_to_login(self, client, gateway, path):
        response = client.get(path)
        assert response.status_code == 302
        assert response["Location"].startswith("/login/?next=")

    def test_non_admin_refused(self, user_client):
        response = user_client.get("/admin/kitchens/")
        assert response.status_code == 302
        assert response["Location"] == "/"

    def test_role_rechecked_on_every_request(self, admin_client, gateway, admin_profile):
        assert admin_client.get("/admin/kitchens/").status_code == 200

        gateway.update(PROFILES_TABLE, {"id": admin_profile["id"]}, {"role": "user"})
        assert admin_client.get("/admin/kitchens/").status_code == 302

    def test_profile_lookup_failure(self, admin_client, gateway):
        gateway.fail(PROFILES_TABLE)
        response = admin_client.get("/admin/kitchens/")
        assert response.status_code == 503


class TestKitchenAdmin:

    def test_list(self, admin_client, kitchen):
        response = admin_client.get("/admin/kitchens/")
        content = response.content.decode()
        assert "Curry House" in content
        assert "Downtown" in content

    def test_create(self, admin_client, gateway):
        response = admin_client.post("/admin/kitchens/", {
            "name": "Burger Barn", "sort_order": "2", "phone_number": "(407) 555-0100", "active_kitchen": "on",
        })
        assert response.status_code == 302
        rows = gateway.rows(KITCHENS_TABLE)
        assert [r["name"] for r in rows] == ["Burger Barn"]
        assert rows[0]["location_id"] is None

    def test_create_invalid_shows_errors(self, admin_client, gateway):
        response = admin_client.post("/admin/kitchens/", {"name": "B", "sort_order": "x"})
        assert response.status_code == 200
        assert response.context["form"].errors
        assert gateway.rows(KITCHENS_TABLE) == []

    def test_create_gateway_error_keeps_form(self, admin_client, gateway):
        gateway.fail(KITCHENS_TABLE)
        response = admin_client.post("/admin/kitchens/", {"name": "Burger Barn", "sort_order": "2"})
        # list fetch fails after the save error, so the retry page is shown
        assert response.status_code == 503
        assert "Error saving kitchen" in response.content.decode()

    def test_update(self, admin_client, gateway, kitchen):
        response = admin_client.post("/admin/kitchens/k1/", {
            "name": "Curry House Deluxe", "sort_order": "1", "location_id": "loc-1",
        })
        assert response.status_code == 302
        stored = gateway.get(KITCHENS_TABLE, {"id": "k1"})
        assert stored["name"] == "Curry House Deluxe"
        assert stored["active_kitchen"] is False

    def test_detail_prefilled(self, admin_client, kitchen):
        response = admin_client.get("/admin/kitchens/k1/")
        assert response.context["form"].initial["name"] == "Curry House"
        assert response.context["menu_item_count"] == 1

    def test_missing_kitchen_redirects(self, admin_client, gateway):
        response = admin_client.get("/admin/kitchens/nope/")
        assert response.status_code == 302
        assert response["Location"] == "/admin/kitchens/"

    def test_delete_cascades(self, admin_client, gateway, kitchen):
        response = admin_client.post("/admin/kitchens/k1/delete/")
        assert response.status_code == 302
        assert gateway.rows(KITCHENS_TABLE) == []
        assert gateway.rows(MENU_ITEMS_TABLE) == []
        assert gateway.rows(ORDERING_LINKS_TABLE) == []

    def test_delete_requires_post(self, admin_client, kitchen):
        assert admin_client.get("/admin/kitchens/k1/delete/").status_code == 405


class TestMenuItemAdmin:

    def test_grouped_table(self, admin_client, kitchen):
        response = admin_client.get("/admin/kitchens/k1/menu/")
        assert [s["label"] for s in response.context["sections"]] == ["Appetizers"]

    def test_add_with_new_category(self, admin_client, gateway, kitchen):
        response = admin_client.post("/admin/kitchens/k1/menu/add/", {
            "name": "Gulab Jamun", "price": "4.50", "category": NEW_CATEGORY,
            "new_category": "Desserts", "category_sort_order": "90", "tags": "Sweet,, Popular",
            "is_available": "on",
        })
        assert response.status_code == 302
        item = gateway.single(MENU_ITEMS_TABLE, name="Gulab Jamun")
        assert item["kitchen_id"] == "k1"
        assert item["category"] == "Desserts"
        assert item["price"] == 4.5
        assert item["tags"] == "Sweet, Popular"

    def test_add_rejects_zero_price(self, admin_client, gateway, kitchen):
        response = admin_client.post("/admin/kitchens/k1/menu/add/", {"name": "Freebie", "price": "0"})
        assert response.status_code == 200
        assert "price" in response.context["form"].errors

    def test_edit(self, admin_client, gateway, kitchen):
        response = admin_client.get("/admin/kitchens/k1/menu/m1/edit/")
        assert response.context["form"].initial["name"] == "Samosa"

        response = admin_client.post("/admin/kitchens/k1/menu/m1/edit/", {
            "name": "Veg Samosa", "price": "6.25", "category": "Appetizers", "category_sort_order": "10",
        })
        assert response.status_code == 302
        item = gateway.get(MENU_ITEMS_TABLE, {"id": "m1"})
        assert item["name"] == "Veg Samosa"
        assert item["price"] == 6.25
        assert len(gateway.rows(MENU_ITEMS_TABLE)) == 1

    def test_edit_item_of_other_kitchen(self, admin_client, gateway, kitchen):
        gateway.put(MENU_ITEMS_TABLE, {"id": "m9", "kitchen_id": "other", "name": "Fries", "price": 2})
        response = admin_client.get("/admin/kitchens/k1/menu/m9/edit/")
        assert response.status_code == 302

    def test_delete(self, admin_client, gateway, kitchen):
        admin_client.post("/admin/kitchens/k1/menu/m1/delete/")
        assert gateway.rows(MENU_ITEMS_TABLE) == []

    def test_delete_item_of_other_kitchen(self, admin_client, gateway, kitchen):
        gateway.put(MENU_ITEMS_TABLE, {"id": "m9", "kitchen_id": "k2", "name": "Fries", "price": 2})
        response = admin_client.post("/admin/kitchens/k1/menu/m9/delete/", follow=True)

        assert gateway.get(MENU_ITEMS_TABLE, {"id": "m9"})["name"] == "Fries"
        assert "Menu item not found" in response.content.decode()


class TestOrderingLinksAdmin:

    def test_sync(self, admin_client, gateway, kitchen):
        response = admin_client.post("/admin/kitchens/k1/links/", {
            "form-TOTAL_FORMS": "2",
            "form-INITIAL_FORMS": "1",
            "form-MIN_NUM_FORMS": "0",
            "form-MAX_NUM_FORMS": "1000",
            "form-0-id": "o1",
            "form-0-platform_name": "UberEats",
            "form-0-url": "https://ubereats.com/curry",
            "form-0-DELETE": "on",
            "form-1-id": "",
            "form-1-platform_name": "DoorDash",
            "form-1-url": "https://doordash.com/curry",
            "form-1-logo_url": "",
        })
        assert response.status_code == 302
        links = gateway.rows(ORDERING_LINKS_TABLE)
        assert [l["platform_name"] for l in links] == ["DoorDash"]
        assert links[0]["kitchen_id"] == "k1"

    def test_invalid_link_not_saved(self, admin_client, gateway, kitchen):
        response = admin_client.post("/admin/kitchens/k1/links/", {
            "form-TOTAL_FORMS": "1",
            "form-INITIAL_FORMS": "1",
            "form-MIN_NUM_FORMS": "0",
            "form-MAX_NUM_FORMS": "1000",
            "form-0-id": "o1",
            "form-0-platform_name": "UberEats",
            "form-0-url": "not-a-url",
        })
        assert response.status_code == 200
        assert gateway.get(ORDERING_LINKS_TABLE, {"id": "o1"})["url"] == "https://ubereats.com/curry"

    def test_link_of_other_kitchen_is_not_taken_over(self, admin_client, gateway, kitchen):
        gateway.put(ORDERING_LINKS_TABLE, {
            "id": "o2", "kitchen_id": "k2", "platform_name": "Grubhub", "url": "https://grubhub.com/k2",
        })
        response = admin_client.post("/admin/kitchens/k1/links/", {
            "form-TOTAL_FORMS": "2",
            "form-INITIAL_FORMS": "1",
            "form-MIN_NUM_FORMS": "0",
            "form-MAX_NUM_FORMS": "1000",
            "form-0-id": "o1",
            "form-0-platform_name": "UberEats",
            "form-0-url": "https://ubereats.com/curry",
            "form-1-id": "o2",
            "form-1-platform_name": "Grubhub",
            "form-1-url": "https://grubhub.com/k1",
        })
        assert response.status_code == 302

        other = gateway.get(ORDERING_LINKS_TABLE, {"id": "o2"})
        assert other["kitchen_id"] == "k2"
        assert other["url"] == "https://grubhub.com/k2"
        k1_urls = sorted(l["url"] for l in gateway.rows(ORDERING_LINKS_TABLE) if l["kitchen_id"] == "k1")
        assert k1_urls == ["https://grubhub.com/k1", "https://ubereats.com/curry"]


class TestLocationAdmin:

    def test_create_default_clears_other_defaults(self, admin_client, gateway):
        gateway.put(LOCATIONS_TABLE, {"id": "loc-1", "name": "Old", "address": "x", "is_default": True})
        response = admin_client.post("/admin/locations/", {
            "name": "New", "address": "1 Main St", "sort_order": "1", "nick_name": "new",
            "is_default": "on", "active_location": "on",
        })
        assert response.status_code == 302

        defaults = [l["name"] for l in gateway.rows(LOCATIONS_TABLE) if l.get("is_default")]
        assert defaults == ["New"]

    def test_edit(self, admin_client, gateway):
        gateway.put(LOCATIONS_TABLE, {"id": "loc-1", "name": "Old", "address": "x", "sort_order": 1})
        response = admin_client.post("/admin/locations/loc-1/edit/", {
            "name": "Renamed", "address": "2 Side St", "sort_order": "3",
        })
        assert response.status_code == 302
        stored = gateway.get(LOCATIONS_TABLE, {"id": "loc-1"})
        assert stored["name"] == "Renamed"
        assert stored["sort_order"] == 3

    def test_edit_missing(self, admin_client, gateway):
        response = admin_client.get("/admin/locations/nope/edit/")
        assert response["Location"] == "/admin/locations/"

    def test_delete(self, admin_client, gateway):
        gateway.put(LOCATIONS_TABLE, {"id": "loc-1", "name": "Old", "address": "x"})
        admin_client.post("/admin/locations/loc-1/delete/")
        assert gateway.rows(LOCATIONS_TABLE) == []
