"""
Password hashing and session tokens.

Passwords go through Django's hasher chain (bcrypt first, see
``PASSWORD_HASHERS``). Sessions are stateless signed JWTs issued with
simplejwt and carried in an HTTP-only cookie; a session ends when it
expires, when the signing secret rotates, or when the account stops being
active (the user is reloaded on every request).
"""

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken


def hash_password(raw_password):
    return make_password(raw_password)


def verify_password(raw_password, password_hash):
    if not password_hash:
        return False
    return check_password(raw_password, password_hash)


def session_claims(user):
    return {
        'email': user.email,
        'full_name': user.full_name,
        'role': user.role,
    }


def issue_session(user):
    """Return a signed session token carrying the account's claims."""
    token = AccessToken.for_user(user)
    for claim, value in session_claims(user).items():
        token[claim] = value
    return str(token)


def verify_session(raw_token):
    """Return the claims of a valid session token, or None."""
    try:
        token = AccessToken(raw_token)
    except TokenError:
        return None

    # simplejwt may store the id claim as a string
    account_id = token.get(settings.SIMPLE_JWT['USER_ID_CLAIM'])
    return {
        'account_id': int(account_id) if account_id is not None else None,
        'email': token.get('email'),
        'full_name': token.get('full_name'),
        'role': token.get('role'),
    }


def set_session_cookie(response, raw_token):
    response.set_cookie(
        settings.JWT_COOKIE_NAME,
        raw_token,
        max_age=settings.JWT_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.JWT_COOKIE_SECURE,
        samesite=settings.JWT_COOKIE_SAMESITE,
        path='/',
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(
        settings.JWT_COOKIE_NAME,
        path='/',
        samesite=settings.JWT_COOKIE_SAMESITE,
    )
    return response


def start_session(response, user):
    """Issue a session for ``user`` and attach it to ``response`` as a cookie."""
    return set_session_cookie(response, issue_session(user))
