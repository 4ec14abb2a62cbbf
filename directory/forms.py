from django import forms
from django.core.validators import RegexValidator

from .locations import DEFAULT_SORT_ORDER
from .shaping import DEFAULT_CATEGORY_SORT_ORDER, format_tags

NEW_CATEGORY = "__new__"

phone_validator = RegexValidator(
    r"^\+?[0-9\s\-\(\)]*$",
    "Invalid phone number format",
)


def blank_to_none(value):
    return value or None


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput)


class KitchenForm(forms.Form):
    """
    Form used for creating or editing a kitchen.
    """
    name = forms.CharField(min_length=2, max_length=255)
    description = forms.CharField(widget=forms.Textarea, required=False)
    logo_url = forms.URLField(required=False, label="Logo URL")
    header_image_url = forms.URLField(required=False, label="Header Image URL")
    phone_number = forms.CharField(max_length=30, required=False, validators=[phone_validator])
    sort_order = forms.IntegerField(initial=0)
    active_kitchen = forms.BooleanField(required=False, initial=True, label="Active")
    location_id = forms.ChoiceField(choices=[], required=False, label="Location")

    def __init__(self, *args, locations=(), **kwargs):
        """
        Populate the location dropdown from the locations the view fetched.
        """
        super().__init__(*args, **kwargs)

        self.fields["location_id"].choices = [("", "No location")] + [
            (l["id"], l.get("display_name") or l.get("name", l["id"]))
            for l in locations
        ]

    def to_payload(self):
        data = self.cleaned_data
        return {
            "name": data["name"],
            "description": blank_to_none(data["description"]),
            "logo_url": blank_to_none(data["logo_url"]),
            "header_image_url": blank_to_none(data["header_image_url"]),
            "phone_number": blank_to_none(data["phone_number"]),
            "sort_order": data["sort_order"],
            "active_kitchen": data["active_kitchen"],
            "location_id": blank_to_none(data["location_id"]),
        }


class MenuItemForm(forms.Form):
    """
    Form used for adding or editing a menu item.
    """
    name = forms.CharField(min_length=2, max_length=255)
    description = forms.CharField(widget=forms.Textarea, required=False)
    price = forms.DecimalField(max_digits=8, decimal_places=2)
    image_url = forms.URLField(required=False, label="Image URL")
    is_available = forms.BooleanField(required=False, initial=True, label="Available")
    is_vegetarian = forms.BooleanField(required=False, label="Vegetarian")
    category = forms.ChoiceField(choices=[], required=False)
    new_category = forms.CharField(max_length=100, required=False, label="New category name")
    category_sort_order = forms.IntegerField(initial=DEFAULT_CATEGORY_SORT_ORDER, required=False)
    tags = forms.CharField(
        max_length=500,
        required=False,
        help_text='Comma separated, e.g. "Spicy, Healthy, Featured"',
    )

    def __init__(self, *args, categories=(), **kwargs):
        """
        Offer the kitchen's existing categories plus "add new".
        """
        super().__init__(*args, **kwargs)

        # Keep the current value selectable even if no other item uses it
        current = self.initial.get("category")
        labels = list(categories)
        if current and current not in labels:
            labels.append(current)

        self.fields["category"].choices = (
            [("", "No category")]
            + [(c, c) for c in labels]
            + [(NEW_CATEGORY, "Add new category")]
        )

    def clean_price(self):
        price = self.cleaned_data["price"]
        if price <= 0:
            raise forms.ValidationError("Price must be greater than zero.")
        return price

    def clean_tags(self):
        return format_tags(self.cleaned_data["tags"])

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("category") == NEW_CATEGORY:
            new_category = (cleaned.get("new_category") or "").strip()
            if not new_category:
                self.add_error("new_category", "Enter a name for the new category.")
            else:
                cleaned["category"] = new_category
        return cleaned

    def to_payload(self, kitchen_id):
        data = self.cleaned_data
        sort_order = data.get("category_sort_order")
        return {
            "kitchen_id": kitchen_id,
            "name": data["name"],
            "description": blank_to_none(data["description"]),
            "price": data["price"],
            "image_url": blank_to_none(data["image_url"]),
            "is_available": data["is_available"],
            "is_vegetarian": data["is_vegetarian"],
            "category": blank_to_none(data["category"]),
            "category_sort_order": DEFAULT_CATEGORY_SORT_ORDER if sort_order is None else sort_order,
            "tags": data["tags"],
        }


class OrderingLinkForm(forms.Form):
    """
    One delivery platform link. ``id`` is empty for links not saved yet.
    """
    id = forms.CharField(widget=forms.HiddenInput, required=False)
    platform_name = forms.CharField(max_length=100, help_text="e.g. UberEats, DoorDash")
    url = forms.URLField(label="URL")
    logo_url = forms.URLField(required=False, label="Logo URL (optional)")

    def to_payload(self, kitchen_id):
        data = self.cleaned_data
        return {
            "id": blank_to_none(data.get("id")),
            "kitchen_id": kitchen_id,
            "platform_name": data["platform_name"].strip(),
            "url": data["url"].strip(),
            "logo_url": blank_to_none((data.get("logo_url") or "").strip()),
        }


OrderingLinkFormSet = forms.formset_factory(OrderingLinkForm, extra=1, can_delete=True)


def ordering_link_changes(formset, existing_links, kitchen_id):
    """
    Work out how to bring the stored links in line with a valid formset.

    Returns ``(to_upsert, ids_to_delete)``: links ticked for deletion or
    missing from the submission are deleted; the rest are upserted.
    A submitted id that is not one of ``existing_links`` is saved as a new link.
    """
    existing_ids = {l["id"] for l in existing_links}
    to_upsert = []
    kept_ids = set()
    for form in formset:
        if not form.has_changed() and not form.cleaned_data.get("id"):
            continue
        if form.cleaned_data.get("DELETE"):
            continue
        payload = form.to_payload(kitchen_id)
        if payload["id"] in existing_ids:
            kept_ids.add(payload["id"])
        else:
            payload.pop("id")
        to_upsert.append(payload)

    ids_to_delete = [l["id"] for l in existing_links if l["id"] not in kept_ids]
    return to_upsert, ids_to_delete


class LocationForm(forms.Form):
    """
    Form used for creating or editing a location.
    """
    name = forms.CharField(max_length=255)
    display_name = forms.CharField(max_length=255, required=False)
    nick_name = forms.SlugField(
        max_length=100,
        required=False,
        help_text="Used in public URLs: /l/<nick name>/",
    )
    address = forms.CharField(max_length=500)
    phone_number = forms.CharField(max_length=30, required=False, validators=[phone_validator])
    sort_order = forms.IntegerField(initial=DEFAULT_SORT_ORDER)
    is_default = forms.BooleanField(required=False, label="Default location")
    active_location = forms.BooleanField(required=False, initial=True, label="Active")

    def to_payload(self):
        data = self.cleaned_data
        return {
            "name": data["name"],
            "display_name": data["display_name"] or data["name"],
            "nick_name": blank_to_none(data["nick_name"]),
            "address": data["address"],
            "phone_number": blank_to_none(data["phone_number"]),
            "sort_order": data["sort_order"],
            "is_default": data["is_default"],
            "active_location": data["active_location"],
        }
