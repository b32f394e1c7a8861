#!/usr/bin/env python3
"""Checkr OAuth setup script.

Collects the OAuth client credentials of your Checkr partner application and
generates the key used to encrypt stored access tokens.  There is nothing to
validate up front: Checkr only accepts the client secret together with an
authorization code from a real connect flow.

Usage:
    1. Open your partner application in the Checkr dashboard
       (staging: https://dashboard.checkrhq-staging.net/account/applications)
    2. Copy its OAuth client ID and client secret
    3. Run this script and follow the prompts
    4. Register <your host>/api/checkr/oauth as the OAuth redirect URL and
       <your host>/api/checkr/webhooks as the webhook URL
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptography.fernet import Fernet

API_URLS = {
    "staging": "https://api.checkr-staging.com",
    "production": "https://api.checkr.com",
}


def existing_encryption_key() -> str | None:
    """Return the TOKEN_ENCRYPTION_KEY already in use, if any.

    Stored access tokens only decrypt with this key, so setup must keep it.
    """
    from config import settings
    from services.credential_manager import get_credential

    return get_credential("TOKEN_ENCRYPTION_KEY") or settings.TOKEN_ENCRYPTION_KEY or None


def build_settings(
    client_id: str,
    client_secret: str,
    env: str,
    encryption_key: str | None = None,
) -> dict[str, str]:
    """Return the settings for a Checkr environment.

    A new encryption key is generated only when ``encryption_key`` is empty.
    """
    return {
        "CHECKR_API_URL": API_URLS.get(env, API_URLS["staging"]),
        "CHECKR_OAUTH_CLIENT_ID": client_id,
        "CHECKR_OAUTH_CLIENT_SECRET": client_secret,
        "TOKEN_ENCRYPTION_KEY": encryption_key or Fernet.generate_key().decode("ascii"),
    }


def store_in_keychain(values: dict[str, str]) -> list[str]:
    """Store the credential settings in the keychain.

    A TOKEN_ENCRYPTION_KEY already in the keychain is never replaced;
    ``values`` is updated to hold the kept key.

    Returns:
        The keys that could not be stored.
    """
    from services.credential_manager import CREDENTIAL_KEYS, get_credential, set_credential

    failed = []
    for key, value in values.items():
        if key not in CREDENTIAL_KEYS:
            continue
        if key == "TOKEN_ENCRYPTION_KEY":
            current = get_credential(key)
            if current and current != value:
                print(f"  Kept the {key} already in keychain")
                values[key] = current
                continue
        if set_credential(key, value):
            print(f"  Stored {key} in keychain")
        else:
            print(f"  Failed to store {key}")
            failed.append(key)
    return failed


def main():
    """Prompt for credentials and print/store the resulting settings."""
    print("Checkr OAuth Setup")
    print("=" * 50)
    print()

    client_id = input("Enter your Checkr OAuth client ID: ").strip()
    if not client_id:
        print("Error: No client ID provided")
        sys.exit(1)

    client_secret = input("Enter your Checkr OAuth client secret: ").strip()
    if not client_secret:
        print("Error: No client secret provided")
        sys.exit(1)

    print()
    print("Choose environment:")
    print("  1. staging")
    print("  2. production")
    env_choice = input("Enter choice (1 or 2) [1]: ").strip() or "1"
    env = {"1": "staging", "2": "production"}.get(env_choice, "staging")

    encryption_key = existing_encryption_key()
    if encryption_key:
        print("Keeping the existing TOKEN_ENCRYPTION_KEY.")
    values = build_settings(client_id, client_secret, env, encryption_key)

    answer = input("\nStore credentials in the system keychain? [Y/n] ").strip().lower()
    if answer in ("", "y", "yes"):
        failed = store_in_keychain(values)
    else:
        print("  Skipped keychain storage.")
        failed = [k for k in values if k != "CHECKR_API_URL"]

    print()
    print("Add the following to your .env file:")
    print()
    print(f"CHECKR_API_URL={values['CHECKR_API_URL']}")
    for key in failed:
        print(f"{key}={values[key]}")
    print()
    print("Keep TOKEN_ENCRYPTION_KEY safe: stored access tokens can't be")
    print("decrypted without it.")


if __name__ == "__main__":
    main()
