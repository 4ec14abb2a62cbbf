def portal_session(request):
    """
    Exposes the signed-in user to templates for navigation only.
    ``portal_is_admin`` is set by ``admin_required`` after it has read
    the role, so admin links only show on pages that checked it.
    """
    return {
        "portal_session": getattr(request, "portal_session", None),
        "portal_is_admin": getattr(request, "portal_is_admin", False),
    }
