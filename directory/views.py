import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.hashers import check_password
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

# AWS wrapper client
from aws_lib.dynamodb_client import DynamoDBClient, GatewayError
from aws_config import KITCHENS_TABLE, LOCATIONS_TABLE, PROFILES_TABLE

from .forms import LoginForm
from .locations import (
    MATCHED_DEFAULT,
    active_locations,
    default_location_id,
    kitchens_for_location,
    resolve_location,
)
from .session import PortalSession, SessionRepository
from .shaping import category_anchor, group_menu_items, parse_tags

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()


def gateway_error_page(request, error):
    """Error state with a Retry link back to the same URL."""
    messages.error(request, error.message)
    return render(request, "directory/error.html", {
        "retry_url": request.get_full_path(),
    }, status=503)


def menu_sections(items):
    """Grouped menu items in the shape the templates iterate over."""
    categories, groups = group_menu_items(items)
    return [
        {
            "label": label,
            "anchor": category_anchor(label),
            "items": [dict(item, tag_list=parse_tags(item.get("tags"))) for item in groups[label]],
        }
        for label in categories
    ]


def render_location(request, location, kitchens):
    return render(request, "directory/location_kitchens.html", {
        "location": location,
        "kitchens": kitchens_for_location(kitchens, location["id"]),
    })


# public pages
def location_landing(request):
    """
    Shows the kitchens of the default location, or the list of
    locations when no default is reachable.
    """
    try:
        locations = ddb.scan(LOCATIONS_TABLE)
        default_id = default_location_id(locations, settings.DEFAULT_LOCATION_ID)
        resolution = resolve_location(locations, None, default_id)
        if not resolution.found:
            return render(request, "directory/locations.html", {
                "locations": active_locations(locations),
            })
        kitchens = ddb.query(KITCHENS_TABLE, filters={"location_id": resolution.location["id"]})
    except GatewayError as e:
        return gateway_error_page(request, e)

    return render_location(request, resolution.location, kitchens)


def locations_list(request):
    """All active locations, by sort order."""
    try:
        locations = ddb.scan(LOCATIONS_TABLE)
    except GatewayError as e:
        return gateway_error_page(request, e)

    return render(request, "directory/locations.html", {
        "locations": active_locations(locations),
    })


def location_kitchens(request, nickname):
    """
    Kitchens at the location named by ``nickname``; falls back to the
    default location, then to a not-found page.
    """
    try:
        locations = ddb.scan(LOCATIONS_TABLE)
        default_id = default_location_id(locations, settings.DEFAULT_LOCATION_ID)
        resolution = resolve_location(locations, nickname, default_id)
        if not resolution.found:
            return render(request, "directory/location_not_found.html", {
                "nickname": nickname,
            }, status=404)
        kitchens = ddb.query(KITCHENS_TABLE, filters={"location_id": resolution.location["id"]})
    except GatewayError as e:
        return gateway_error_page(request, e)

    if resolution.matched_by == MATCHED_DEFAULT:
        messages.info(request, f"We couldn't find '{nickname}', showing our default location instead.")

    return render_location(request, resolution.location, kitchens)


def kitchen_menu(request, kitchen_id):
    """
    One kitchen's menu grouped by category, with its ordering links.
    """
    try:
        kitchen = ddb.fetch_kitchen(kitchen_id)
    except GatewayError as e:
        return gateway_error_page(request, e)

    if not kitchen:
        return render(request, "directory/kitchen_not_found.html", status=404)

    # The location is optional; the menu still renders without it
    location = None
    if kitchen.get("location_id"):
        try:
            location = ddb.get(LOCATIONS_TABLE, {"id": kitchen["location_id"]}) or None
        except GatewayError as e:
            messages.warning(request, f"Location details are unavailable: {e.message}")

    sections = menu_sections(kitchen["menu_items"])
    return render(request, "directory/kitchen_menu.html", {
        "kitchen": kitchen,
        "location": location,
        "sections": sections,
        "ordering_links": kitchen["ordering_links"],
    })


# sign in / out
def login_view(request):
    """
    Checks the password against the profiles table and stores the
    user's id and email in the session.
    """
    next_url = request.POST.get("next") or request.GET.get("next") or ""
    if not url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        next_url = ""

    if request.method == "POST":
        form = LoginForm(request.POST)
        if form.is_valid():
            email = form.cleaned_data["email"].lower()
            try:
                profile = ddb.single(PROFILES_TABLE, email=email)
            except GatewayError as e:
                messages.error(request, e.message)
                return render(request, "directory/login.html", {"form": form, "next": next_url})

            if profile and check_password(form.cleaned_data["password"], profile.get("password")):
                SessionRepository(request.session).save(
                    PortalSession(user_id=profile["id"], email=profile["email"])
                )
                logger.info("User %s signed in", email)
                return redirect(next_url or "admin_kitchens")

            messages.error(request, "Invalid credentials")
    else:
        form = LoginForm()

    return render(request, "directory/login.html", {"form": form, "next": next_url})


@require_POST
def logout_view(request):
    SessionRepository(request.session).clear()
    messages.info(request, "You have been signed out")
    return redirect("location_landing")
