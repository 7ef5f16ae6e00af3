import pytest

from sm3kdf.core.factory import KEY_FACTORIES, PBKDF2KeyFactory, get_key_factory
from sm3kdf.core.keys import KeyKind, PBEKey, PBEKeySpec, PBKDF2Key, RawSecretKey, SpecKind
from sm3kdf.errors import (
    InvalidKeyError,
    InvalidKeySpecError,
    InvalidParameterError,
)

SALT = b"factory-salt"


@pytest.fixture
def factory():
    return get_key_factory("PBKDF2WithHmacSM3")


@pytest.fixture
def key(factory):
    return factory.generate_secret(PBEKeySpec("password", SALT, 4, 256))


def test_generate_secret(factory, key):
    assert isinstance(key, PBKDF2Key)
    assert key.algorithm == "PBKDF2WithHmacSM3"
    assert key == PBKDF2Key(PBEKeySpec("password", SALT, 4, 256), "HmacSM3")


def test_generate_secret_only_accepts_pbe_specs(factory):
    class RawSpec:
        kind = SpecKind.RAW

    with pytest.raises(InvalidKeySpecError):
        factory.generate_secret(RawSpec())
    with pytest.raises(InvalidKeySpecError):
        factory.generate_secret(None)


def test_generate_secret_reports_bad_parameters(factory):
    with pytest.raises(InvalidParameterError):
        factory.generate_secret(PBEKeySpec("password", SALT, 0, 256))


def test_key_spec_round_trip(factory, key):
    spec = factory.get_key_spec(key, SpecKind.PBE)
    assert spec.get_password() == "password"
    assert spec.get_salt() == SALT
    assert spec.get_iteration_count() == 4
    assert spec.get_key_length() == 256

    again = factory.generate_secret(spec)
    assert again == key
    assert again.get_encoded() == key.get_encoded()


def test_key_spec_round_trip_for_multi_block_key():
    factory = get_key_factory("PBKDF2WithHmacSHA256")
    key = factory.generate_secret(PBEKeySpec("password", SALT, 2, 48 * 8))
    again = factory.generate_secret(factory.get_key_spec(key))
    assert again.get_encoded() == key.get_encoded()
    assert len(again.get_encoded()) == 48


def test_key_spec_requires_password_key(factory):
    with pytest.raises(InvalidKeySpecError):
        factory.get_key_spec(RawSecretKey(b"\x00" * 32, "PBKDF2WithHmacSM3"), SpecKind.PBE)
    with pytest.raises(InvalidKeySpecError):
        factory.get_key_spec(None, SpecKind.PBE)


def test_key_spec_only_in_pbe_form(factory, key):
    with pytest.raises(InvalidKeySpecError):
        factory.get_key_spec(key, SpecKind.RAW)


def test_translate_own_key_is_identity(factory, key):
    assert factory.translate_key(key) is key


def test_translate_own_key_still_checks_policy(factory, key, monkeypatch):
    monkeypatch.setenv("SM3KDF_MIN_SALT_BYTES", "32")
    with pytest.raises(InvalidKeyError) as info:
        factory.translate_key(key)
    assert isinstance(info.value.__cause__, InvalidParameterError)

    monkeypatch.setenv("SM3KDF_MIN_SALT_BYTES", "0")
    monkeypatch.setenv("SM3KDF_MAX_ITERATIONS", "3")
    with pytest.raises(InvalidKeyError):
        factory.translate_key(key)


def test_translate_destroyed_own_key(factory, key):
    key.destroy()
    with pytest.raises(InvalidKeyError) as info:
        factory.translate_key(key)
    assert str(info.value) == "Invalid key component(s)"


def test_translate_untagged_key(factory):
    class Untagged:
        algorithm = "PBKDF2WithHmacSM3"
        format = "RAW"

    with pytest.raises(InvalidKeyError) as info:
        factory.translate_key(Untagged())
    assert str(info.value) == "Only PBEKey is accepted"


def test_translate_foreign_pbe_key(factory, key):
    foreign = PBEKey("password", SALT, 4, key.get_encoded(), "pbkdf2withhmacsm3")
    translated = factory.translate_key(foreign)
    assert translated is not foreign
    assert translated.kind is KeyKind.PBKDF2
    assert translated.get_salt() == SALT
    assert translated.get_iteration_count() == 4
    assert translated == key
    # only the copies taken for translation are wiped
    assert foreign.get_password() == "password"
    assert foreign.get_encoded() == key.get_encoded()


def test_translate_foreign_key_with_bad_components(factory):
    foreign = PBEKey("password", SALT, 0, b"\x00" * 32, "PBKDF2WithHmacSM3")
    with pytest.raises(InvalidKeyError) as info:
        factory.translate_key(foreign)
    assert str(info.value) == "Invalid key component(s)"
    assert isinstance(info.value.__cause__, InvalidParameterError)


def test_translate_rejects_other_prf(factory):
    sha_key = get_key_factory("PBKDF2WithHmacSHA256").generate_secret(
        PBEKeySpec("password", SALT, 4, 256))
    with pytest.raises(InvalidKeyError):
        factory.translate_key(sha_key)


def test_translate_rejects_raw_key_with_matching_name(factory):
    raw = RawSecretKey(b"\x00" * 32, "PBKDF2WithHmacSM3")
    with pytest.raises(InvalidKeyError) as info:
        factory.translate_key(raw)
    assert str(info.value) == "Only PBEKey is accepted"


def test_translate_rejects_non_raw_format(factory):
    foreign = PBEKey("password", SALT, 4, b"\x00" * 32, "PBKDF2WithHmacSM3", format="PKCS#8")
    with pytest.raises(InvalidKeyError):
        factory.translate_key(foreign)


def test_translate_rejects_none(factory):
    with pytest.raises(InvalidKeyError):
        factory.translate_key(None)


def test_factory_table():
    assert set(KEY_FACTORIES) == {
        "PBKDF2WithHmacSM3",
        "PBKDF2WithHmacSHA1",
        "PBKDF2WithHmacSHA224",
        "PBKDF2WithHmacSHA256",
        "PBKDF2WithHmacSHA384",
        "PBKDF2WithHmacSHA512",
    }
    with pytest.raises(TypeError):
        KEY_FACTORIES["PBKDF2WithHmacMD5"] = None


def test_factory_lookup_ignores_case():
    assert get_key_factory("pbkdf2withhmacsm3") is KEY_FACTORIES["PBKDF2WithHmacSM3"]
    with pytest.raises(InvalidParameterError):
        get_key_factory("PBKDF2WithHmacMD5")
    with pytest.raises(InvalidParameterError):
        PBKDF2KeyFactory("HmacMD5")
