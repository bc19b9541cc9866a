from django.contrib.auth.models import AnonymousUser
from rest_framework import exceptions
from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """
    DRF token auth using the `Authorization: Bearer <token>` scheme.
    """
    keyword = 'Bearer'


def resolve_caller(request):
    """
    Identify the caller for a GraphQL request.

    Missing, malformed, unknown or inactive tokens all resolve to an
    anonymous caller; individual operations decide whether that is allowed.
    """
    try:
        result = BearerTokenAuthentication().authenticate(request)
    except exceptions.AuthenticationFailed:
        return AnonymousUser()
    if result is None:
        return AnonymousUser()
    user, _token = result
    return user
