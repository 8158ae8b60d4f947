"""Print a long-lived bearer token for an existing user id.

Usage:
    python create_token.py <user id> [days]
"""
import sys

from pet_minder_api.app.core.security import create_access_token

user_id = sys.argv[1]
days = int(sys.argv[2]) if len(sys.argv) > 2 else 365
print(create_access_token({"sub": user_id}, expires_delta=days * 24 * 60 * 60))
