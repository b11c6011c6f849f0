from campus_directory.security import hash_password, verify_password


def test_hash_is_not_plaintext_and_verifies():
    stored = hash_password("Secret123")
    assert "Secret123" not in stored
    assert stored.startswith("pbkdf2_sha256$")
    assert verify_password("Secret123", stored)


def test_wrong_password_does_not_verify():
    assert not verify_password("secret123", hash_password("Secret123"))


def test_same_password_gets_different_salts():
    assert hash_password("abc") != hash_password("abc")


def test_custom_iterations_are_stored_with_the_hash():
    stored = hash_password("abc", iterations=1000)
    assert stored.split("$")[1] == "1000"
    assert verify_password("abc", stored)


def test_malformed_stored_values_never_verify():
    for stored in ("", "plaintext", "pbkdf2_sha256$x$y$z", "md5$10$AAAA$AAAA", None):
        assert not verify_password("plaintext", stored)
