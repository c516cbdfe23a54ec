"""
Print a password hash for AUTH_PASSWORD_HASH
Run:  python create_password_hash.py <password>
"""
import sys
from getpass import getpass

from timetable.auth import hash_password

password = sys.argv[1] if len(sys.argv) > 1 else getpass("Password: ")
if not password:
    print("Password cannot be empty")
    sys.exit(1)

print("Add to .env:")
print(f"  AUTH_PASSWORD_HASH={hash_password(password)}")
