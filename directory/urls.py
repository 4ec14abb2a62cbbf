from django.urls import path

from . import admin_views, views

urlpatterns = [
    # Public
    path("", views.location_landing, name="location_landing"),
    path("locations/", views.locations_list, name="locations_list"),
    path("l/<slug:nickname>/", views.location_kitchens, name="location_kitchens"),
    path("kitchen/<str:kitchen_id>/", views.kitchen_menu, name="kitchen_menu"),

    # Auth
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),

    # Kitchens
    path("admin/kitchens/", admin_views.admin_kitchens, name="admin_kitchens"),
    path("admin/kitchens/<str:kitchen_id>/", admin_views.admin_kitchen_detail, name="admin_kitchen_detail"),
    path("admin/kitchens/<str:kitchen_id>/delete/", admin_views.admin_kitchen_delete, name="admin_kitchen_delete"),

    # Menu items
    path("admin/kitchens/<str:kitchen_id>/menu/", admin_views.admin_menu_items, name="admin_menu_items"),
    path("admin/kitchens/<str:kitchen_id>/menu/add/", admin_views.admin_menu_item_add, name="admin_menu_item_add"),
    path("admin/kitchens/<str:kitchen_id>/menu/<str:item_id>/edit/", admin_views.admin_menu_item_edit, name="admin_menu_item_edit"),
    path("admin/kitchens/<str:kitchen_id>/menu/<str:item_id>/delete/", admin_views.admin_menu_item_delete, name="admin_menu_item_delete"),

    # Ordering links
    path("admin/kitchens/<str:kitchen_id>/links/", admin_views.admin_ordering_links, name="admin_ordering_links"),

    # Locations
    path("admin/locations/", admin_views.admin_locations, name="admin_locations"),
    path("admin/locations/<str:location_id>/edit/", admin_views.admin_location_edit, name="admin_location_edit"),
    path("admin/locations/<str:location_id>/delete/", admin_views.admin_location_delete, name="admin_location_delete"),
]
