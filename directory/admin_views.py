import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

# AWS wrapper client
from aws_lib.dynamodb_client import DynamoDBClient, GatewayError
from aws_config import (
    KITCHENS_TABLE,
    LOCATIONS_TABLE,
    MENU_ITEMS_TABLE,
    ORDERING_LINKS_TABLE,
)

from .decorators import admin_required
from .forms import (
    KitchenForm,
    LocationForm,
    MenuItemForm,
    OrderingLinkFormSet,
    ordering_link_changes,
)
from .locations import sort_locations
from .shaping import existing_categories
from .views import gateway_error_page, menu_sections

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()


# kitchens
@admin_required
def admin_kitchens(request):
    """
    Lists kitchens and handles the "new kitchen" form.
    """
    try:
        locations = sort_locations(ddb.scan(LOCATIONS_TABLE))
    except GatewayError as e:
        return gateway_error_page(request, e)

    if request.method == "POST":
        form = KitchenForm(request.POST, locations=locations)
        if form.is_valid():
            try:
                kitchen = ddb.upsert(KITCHENS_TABLE, form.to_payload())
            except GatewayError as e:
                messages.error(request, f"Error saving kitchen: {e.message}")
            else:
                logger.info("Created kitchen %s", kitchen["id"])
                messages.success(request, f"Kitchen '{kitchen['name']}' created")
                return redirect("admin_kitchens")
    else:
        form = KitchenForm(locations=locations)

    try:
        kitchens = ddb.query(KITCHENS_TABLE, order_by=["sort_order", "name"])
    except GatewayError as e:
        return gateway_error_page(request, e)

    # Map location_id → name for easy readability
    location_lookup = {l["id"]: l.get("display_name") or l.get("name") for l in locations}
    for k in kitchens:
        k["location_name"] = location_lookup.get(k.get("location_id"), "")

    return render(request, "directory/admin/kitchens.html", {
        "kitchens": kitchens,
        "form": form,
    })


@admin_required
def admin_kitchen_detail(request, kitchen_id):
    """
    Edit a kitchen; also shows a summary of its menu and ordering links.
    """
    try:
        kitchen = ddb.fetch_kitchen(kitchen_id)
        locations = sort_locations(ddb.scan(LOCATIONS_TABLE))
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not kitchen:
        messages.error(request, "Kitchen not found")
        return redirect("admin_kitchens")

    if request.method == "POST":
        form = KitchenForm(request.POST, locations=locations)
        if form.is_valid():
            try:
                ddb.upsert(KITCHENS_TABLE, {"id": kitchen_id, **form.to_payload()})
            except GatewayError as e:
                messages.error(request, f"Error saving kitchen: {e.message}")
            else:
                logger.info("Updated kitchen %s", kitchen_id)
                messages.success(request, "Kitchen updated")
                return redirect("admin_kitchen_detail", kitchen_id=kitchen_id)
    else:
        # Pre-fill form with existing values
        form = KitchenForm(initial=kitchen, locations=locations)

    return render(request, "directory/admin/kitchen_detail.html", {
        "kitchen": kitchen,
        "form": form,
        "menu_item_count": len(kitchen["menu_items"]),
        "ordering_links": kitchen["ordering_links"],
    })


@admin_required
@require_POST
def admin_kitchen_delete(request, kitchen_id):
    """Deletes a kitchen together with its menu items and ordering links."""
    try:
        ddb.delete_where(MENU_ITEMS_TABLE, kitchen_id=kitchen_id)
        ddb.delete_where(ORDERING_LINKS_TABLE, kitchen_id=kitchen_id)
        ddb.delete(KITCHENS_TABLE, {"id": kitchen_id})
    except GatewayError as e:
        messages.error(request, f"Error deleting kitchen: {e.message}")
    else:
        logger.info("Deleted kitchen %s", kitchen_id)
        messages.success(request, "Kitchen deleted")
    return redirect("admin_kitchens")


# menu items
@admin_required
def admin_menu_items(request, kitchen_id):
    """Menu items of one kitchen, grouped the way the public page shows them."""
    try:
        kitchen = ddb.fetch_kitchen(kitchen_id)
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not kitchen:
        messages.error(request, "Kitchen not found")
        return redirect("admin_kitchens")

    return render(request, "directory/admin/menu_items.html", {
        "kitchen": kitchen,
        "sections": menu_sections(kitchen["menu_items"]),
    })


def _menu_item_form_page(request, kitchen_id, item=None):
    """
    Shared add/edit flow: insert when ``item`` is None, update otherwise.
    """
    try:
        kitchen = ddb.fetch_kitchen(kitchen_id)
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not kitchen:
        messages.error(request, "Kitchen not found")
        return redirect("admin_kitchens")

    categories = existing_categories(kitchen["menu_items"])

    if request.method == "POST":
        form = MenuItemForm(request.POST, categories=categories)
        if form.is_valid():
            payload = form.to_payload(kitchen_id)
            if item:
                payload["id"] = item["id"]
            try:
                ddb.upsert(MENU_ITEMS_TABLE, payload)
            except GatewayError as e:
                action = "updating" if item else "creating"
                messages.error(request, f"Error {action} menu item: {e.message}")
            else:
                logger.info("Saved menu item %s for kitchen %s", payload["name"], kitchen_id)
                messages.success(request, "Menu item updated" if item else "Menu item created")
                return redirect("admin_menu_items", kitchen_id=kitchen_id)
    else:
        form = MenuItemForm(initial=item or {}, categories=categories)

    return render(request, "directory/admin/menu_item_form.html", {
        "kitchen": kitchen,
        "item": item,
        "form": form,
    })


@admin_required
def admin_menu_item_add(request, kitchen_id):
    return _menu_item_form_page(request, kitchen_id)


@admin_required
def admin_menu_item_edit(request, kitchen_id, item_id):
    try:
        item = ddb.get(MENU_ITEMS_TABLE, {"id": item_id})
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not item or item.get("kitchen_id") != kitchen_id:
        messages.error(request, "Menu item not found")
        return redirect("admin_menu_items", kitchen_id=kitchen_id)

    return _menu_item_form_page(request, kitchen_id, item)


@admin_required
@require_POST
def admin_menu_item_delete(request, kitchen_id, item_id):
    try:
        item = ddb.get(MENU_ITEMS_TABLE, {"id": item_id})
        if not item or item.get("kitchen_id") != kitchen_id:
            messages.error(request, "Menu item not found")
            return redirect("admin_menu_items", kitchen_id=kitchen_id)
        ddb.delete(MENU_ITEMS_TABLE, {"id": item_id})
    except GatewayError as e:
        messages.error(request, f"Error deleting menu item: {e.message}")
    else:
        messages.success(request, "Menu item deleted")
    return redirect("admin_menu_items", kitchen_id=kitchen_id)


# ordering links
@admin_required
def admin_ordering_links(request, kitchen_id):
    """
    Edit all ordering links of a kitchen at once. Saving deletes links
    that were removed, updates existing ones and inserts new ones.
    """
    try:
        kitchen = ddb.fetch_kitchen(kitchen_id)
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not kitchen:
        messages.error(request, "Kitchen not found")
        return redirect("admin_kitchens")

    existing_links = kitchen["ordering_links"]
    initial = [
        {k: link.get(k) or "" for k in ("id", "platform_name", "url", "logo_url")}
        for link in existing_links
    ]

    if request.method == "POST":
        formset = OrderingLinkFormSet(request.POST, initial=initial)
        if formset.is_valid():
            to_upsert, ids_to_delete = ordering_link_changes(formset, existing_links, kitchen_id)
            try:
                for link_id in ids_to_delete:
                    ddb.delete(ORDERING_LINKS_TABLE, {"id": link_id})
                for link in to_upsert:
                    ddb.upsert(ORDERING_LINKS_TABLE, link)
            except GatewayError as e:
                messages.error(request, f"Error saving links: {e.message}")
            else:
                logger.info(
                    "Ordering links for kitchen %s: %d saved, %d removed",
                    kitchen_id, len(to_upsert), len(ids_to_delete),
                )
                messages.success(request, "Ordering links have been successfully saved")
                return redirect("admin_ordering_links", kitchen_id=kitchen_id)
    else:
        formset = OrderingLinkFormSet(initial=initial)

    return render(request, "directory/admin/ordering_links.html", {
        "kitchen": kitchen,
        "formset": formset,
    })


# locations
def save_location(payload, location_id=None):
    """
    Upsert a location. A location saved as default takes the flag
    away from every other location.
    """
    if location_id:
        payload = {"id": location_id, **payload}
    location = ddb.upsert(LOCATIONS_TABLE, payload)

    if location.get("is_default"):
        for other in ddb.query(LOCATIONS_TABLE, filters={"is_default": True}):
            if other["id"] != location["id"]:
                ddb.update(LOCATIONS_TABLE, {"id": other["id"]}, {"is_default": False})
    return location


@admin_required
def admin_locations(request):
    """Lists locations and handles the "add location" form."""
    if request.method == "POST":
        form = LocationForm(request.POST)
        if form.is_valid():
            try:
                location = save_location(form.to_payload())
            except GatewayError as e:
                messages.error(request, e.message)
            else:
                logger.info("Created location %s", location["id"])
                messages.success(request, "The location has been successfully added")
                return redirect("admin_locations")
    else:
        form = LocationForm()

    try:
        locations = ddb.query(LOCATIONS_TABLE, order_by=["name"])
    except GatewayError as e:
        return gateway_error_page(request, e)

    return render(request, "directory/admin/locations.html", {
        "locations": locations,
        "form": form,
    })


@admin_required
def admin_location_edit(request, location_id):
    try:
        location = ddb.get(LOCATIONS_TABLE, {"id": location_id})
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not location:
        messages.error(request, "Location not found")
        return redirect("admin_locations")

    if request.method == "POST":
        form = LocationForm(request.POST)
        if form.is_valid():
            try:
                save_location(form.to_payload(), location_id)
            except GatewayError as e:
                messages.error(request, e.message)
            else:
                logger.info("Updated location %s", location_id)
                messages.success(request, "The location has been successfully updated")
                return redirect("admin_locations")
    else:
        form = LocationForm(initial=location)

    return render(request, "directory/admin/location_form.html", {
        "location": location,
        "form": form,
    })


@admin_required
@require_POST
def admin_location_delete(request, location_id):
    try:
        ddb.delete(LOCATIONS_TABLE, {"id": location_id})
    except GatewayError as e:
        messages.error(request, f"Error deleting location: {e.message}")
    else:
        messages.success(request, "Location deleted")
    return redirect("admin_locations")
