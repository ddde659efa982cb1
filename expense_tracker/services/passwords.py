"""bcrypt password hashing helpers."""

import bcrypt

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Hashes and verifies passwords with a configurable bcrypt cost."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash or a password bcrypt refuses (over 72 bytes).
            return False
