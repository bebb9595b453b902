#!/usr/bin/env python3
"""
Password Hash Generator
Generates the bcrypt hash for the shared gallery admin password.
Run this script to create the ADMIN_PASSWORD_HASH for your .env file.
"""
import getpass

from affiliate_gallery.utils.auth import hash_password


def main():
    """Prompt for the admin password and print the .env line."""
    print("=" * 60)
    print("Gallery Admin Password Hash Generator")
    print("=" * 60)
    print()
    print("Copy the output to your .env file as ADMIN_PASSWORD_HASH")
    print()

    # Get password securely (won't echo to screen)
    password = getpass.getpass("Enter admin password: ")

    if not password:
        print("\n❌ Error: Password cannot be empty")
        return

    password_confirm = getpass.getpass("Confirm password: ")

    if password != password_confirm:
        print("\n❌ Error: Passwords do not match")
        return

    print("\n⏳ Generating hash (this may take a moment)...")
    hashed = hash_password(password)

    print("\n✅ Success! Copy this line to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hashed}")
    print()
    print("⚠️  Keep this hash secret and never commit it to version control!")
    print()


if __name__ == "__main__":
    main()
