"""Constants shared by the test modules."""

ADMIN = "admin"
SALT = bytes(range(32))
START = 1_000
