"""Hash, HMAC, PBKDF2 and key container building blocks."""
