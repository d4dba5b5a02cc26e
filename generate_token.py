#!/usr/bin/env python3
"""
Generate a bearer token for the Video Learning service cache administration endpoints.
"""
import secrets
import sys

MIN_TOKEN_BYTES = 16


def generate_token(length: int = 32) -> str:
    """
    Generate a cryptographically secure token.

    Args:
        length: Number of random bytes (default: 32)

    Returns:
        str: URL-safe base64 encoded token
    """
    if length < MIN_TOKEN_BYTES:
        raise ValueError(f"Token length must be at least {MIN_TOKEN_BYTES} bytes")
    return secrets.token_urlsafe(length)


def main(argv=None) -> int:
    """Print a fresh token and the .env line that enables it."""
    argv = sys.argv[1:] if argv is None else argv
    length = 32
    if argv:
        try:
            length = int(argv[0])
            token = generate_token(length)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
    else:
        token = generate_token(length)

    print(f"Generated admin token ({length} bytes):")
    print(token)
    print("\nAdd this to your .env file to protect /api/cache endpoints:")
    print(f"API_TOKEN={token}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
