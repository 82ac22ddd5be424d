import pytest

from amor_presente.auth.passwords import hash_password, verify_password

pytestmark = pytest.mark.unit


def test_hash_and_verify():
    hashed = hash_password("segredo123", iterations=1000)
    assert hashed.startswith("pbkdf2:sha256:1000$")
    assert verify_password("segredo123", hashed)
    assert not verify_password("outra", hashed)


def test_salts_differ():
    assert hash_password("x", iterations=1000) != hash_password("x", iterations=1000)


@pytest.mark.parametrize(
    "stored",
    [None, "", "plain", "pbkdf2:sha256:abc$salt$hash", "pbkdf2:sha256:0$salt$hash", "pbkdf2:sha256:10$$hash"],
)
def test_malformed_hashes_never_verify(stored):
    assert verify_password("anything", stored) is False
