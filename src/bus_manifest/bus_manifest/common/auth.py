from __future__ import annotations

from functools import wraps

from flask import jsonify, request

from ..core.exceptions import AuthenticationError
from ..users.tokens import TokenService


def _bearer_token(header: str) -> str:
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Malformed authorization header")
    return token.strip()


def make_token_required(tokens: TokenService):
    """Build a view decorator that rejects requests without a valid bearer token.

    No Authorization header -> 401. A header that does not carry a valid,
    unexpired token -> 403.
    """

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization")
            if not header:
                return jsonify({"error": "Unauthorized"}), 401
            try:
                tokens.decode(_bearer_token(header))
            except AuthenticationError:
                return jsonify({"error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return token_required
