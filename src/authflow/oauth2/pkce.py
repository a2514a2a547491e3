"""PKCE (:rfc:`7636`) and state value generation."""

from __future__ import annotations

import base64
import hashlib
import secrets

from authflow.models import CodeChallengeMethod


def generate_state() -> str:
    """Return a random, URL-safe anti-forgery state value."""
    return secrets.token_urlsafe(32)


def generate_code_verifier() -> str:
    # RFC 7636: 43-128 characters from unreserved character set
    return secrets.token_urlsafe(64)[:128]


def code_challenge(
    code_verifier: str, method: CodeChallengeMethod = CodeChallengeMethod.S256
) -> str:
    """Derive the code challenge sent on the authorization request."""
    if method == CodeChallengeMethod.PLAIN:
        return code_verifier
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce_pair(
    method: CodeChallengeMethod = CodeChallengeMethod.S256,
) -> tuple[str, str]:
    """Generate a PKCE code_verifier and code_challenge.

    Returns:
        A tuple of ``(code_verifier, code_challenge)``.
    """
    code_verifier = generate_code_verifier()
    return code_verifier, code_challenge(code_verifier, method)
