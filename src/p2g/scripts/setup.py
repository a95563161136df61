"""
Interactive Garmin setup wizard.

Prompts for Garmin credentials once, exchanges them for OAuth tokens and
stores the tokens under GARMIN_TOKENS_DIR (default ~/.p2g/garmin_session/)
with owner-only permissions. The password itself is never written to disk.

Usage:
    python -m p2g setup

Re-run whenever uploads start failing with an expired-session error.
"""
import getpass
import sys

from p2g.garmin.auth import GarminAuth


def run_setup() -> None:
    auth = GarminAuth()

    print("\nP2G: Garmin Connect setup\n")
    print(f"OAuth tokens will be stored in: {auth.tokens_dir}\n")

    if auth.has_session():
        overwrite = input("Saved Garmin tokens already exist. Replace them? [y/N] ").strip().lower()
        if overwrite != "y":
            print("Setup cancelled. Existing tokens unchanged.")
            sys.exit(0)
        auth.clear()

    email = input("Garmin Connect email: ").strip()
    password = getpass.getpass("Garmin Connect password: ")
    if not email or not password:
        print("Error: email and password are both required.")
        sys.exit(1)

    print("\nAuthenticating with Garmin Connect...")
    try:
        auth.authenticate_and_save(email, password)
    except Exception as exc:
        print(f"\nAuthentication failed: {exc}")
        sys.exit(1)

    print(f"\nTokens saved to {auth.tokens_dir}")
    print("Run `python -m p2g sync` to upload your Peloton workouts.\n")


if __name__ == "__main__":
    run_setup()
