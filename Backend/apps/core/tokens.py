"""
Invitation token helpers.

Raw tokens travel only inside the invitation link; the database stores
the SHA-256 digest. Candidates are shape-checked before any lookup.
"""

import hashlib
import re
import secrets
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

TOKEN_BYTES = 32

# 32 random bytes encode to 43 base64url characters without padding.
TOKEN_PATTERN = re.compile(r'[A-Za-z0-9_-]{40,50}')


def generate_token():
    """Return a URL-safe token carrying 256 bits of entropy."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(raw_token):
    """Return the hex SHA-256 digest stored in place of the raw token."""
    return hashlib.sha256(raw_token.encode('utf-8')).hexdigest()


def token_expiry(hours=None):
    """Return the expiry timestamp for a token issued now."""
    if hours is None:
        hours = settings.INVITE_TOKEN_EXPIRY_HOURS
    return timezone.now() + timedelta(hours=hours)


def is_well_formed(candidate):
    """Check charset and length only; says nothing about existence."""
    if not isinstance(candidate, str):
        return False
    return TOKEN_PATTERN.fullmatch(candidate) is not None
