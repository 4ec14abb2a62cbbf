import logging
from functools import wraps

from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.http import urlencode

from aws_config import PROFILES_TABLE
from aws_lib.dynamodb_client import DynamoDBClient, GatewayError

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()


def admin_required(view_func):
    """
    Lets the request through only when the signed-in user's profile,
    freshly read from DynamoDB, has the admin role.
    """
    @wraps(view_func)
    def wrapper_func(request, *args, **kwargs):
        portal_session = request.portal_session
        if not portal_session.is_authenticated:
            messages.info(request, "Please log in to access this page")
            return redirect(f"{reverse('login')}?{urlencode({'next': request.get_full_path()})}")

        try:
            profile = ddb.get(PROFILES_TABLE, {"id": portal_session.user_id})
        except GatewayError as e:
            messages.error(request, e.message)
            return render(request, "directory/error.html", {"retry_url": request.get_full_path()}, status=503)

        if profile.get("role") != "admin":
            logger.info("Non-admin %s refused %s", portal_session.email, request.path)
            messages.error(request, "You do not have access to the admin pages")
            return redirect("location_landing")

        request.portal_is_admin = True
        return view_func(request, *args, **kwargs)

    return wrapper_func
