"""Tests for _config.py — schema validation and encrypted persistence."""

import json

import pytest

from cliconf.config._config import (
    Config,
    OrgDefault,
    apply_decryption,
    apply_encryption,
)
from cliconf.config._config_file import ConfigFile
from cliconf.config._crypto import KEY_FILE_NAME
from cliconf.config._schema import (
    API_VERSION,
    ISV_DEBUGGER_SID,
    ConfigPropertyMeta,
    ConfigSchema,
    build_default_schema,
)
from cliconf.config._testing import FakeCrypto
from cliconf.config._types import (
    CryptoError,
    InvalidConfigValueError,
    SchemaNotInitializedError,
    UnknownConfigKeyError,
)


def _config(settings, crypto, *, is_global=True, **kwargs) -> Config:
    return Config.create(
        Config.get_default_options(is_global),
        crypto_factory=crypto.factory,
        settings=settings,
        **kwargs,
    )


def _on_disk(config: Config) -> dict:
    return json.loads(config.path.read_text(encoding="utf-8"))


class TestCreate:
    def test_global_path(self, settings, crypto):
        config = _config(settings, crypto)
        assert config.path == settings.global_state_dir / "cliconf-config.json"
        assert config.is_global()

    def test_local_path(self, settings, crypto):
        config = _config(settings, crypto, is_global=False)
        project = (settings.home_dir.parent / "project").resolve()
        assert config.path == project / ".cliconf" / "cliconf-config.json"

    def test_allowed_properties_require_create(self, settings, crypto):
        with pytest.raises(SchemaNotInitializedError):
            Config.get_allowed_properties()
        _config(settings, crypto)
        assert [prop.key for prop in Config.get_allowed_properties()][:2] == ["instanceUrl", "apiVersion"]

    def test_injected_schema_does_not_replace_default(self, settings, crypto):
        schema = ConfigSchema(properties=(ConfigPropertyMeta(key="token", encrypted=True),))
        config = _config(settings, crypto, schema=schema)
        config.set("token", "t")
        with pytest.raises(UnknownConfigKeyError):
            config.set(API_VERSION, "41.0")
        assert len(Config.get_allowed_properties()) == 8

    def test_create_does_not_touch_disk(self, settings, crypto):
        config = _config(settings, crypto)
        assert not config.exists()
        assert crypto.created == 0


class TestSet:
    def test_valid_api_version(self, settings, crypto):
        config = _config(settings, crypto)
        assert config.set(API_VERSION, "41.0") == {API_VERSION: "41.0"}

    def test_invalid_api_version(self, settings, crypto):
        config = _config(settings, crypto)
        with pytest.raises(InvalidConfigValueError, match="API version") as excinfo:
            config.set(API_VERSION, "abc")
        assert excinfo.value.key == API_VERSION
        assert config.get_contents() == {}

    def test_api_version_can_be_unset(self, settings, crypto):
        config = _config(settings, crypto)
        config.set(API_VERSION, "41.0")
        assert config.set(API_VERSION, None) == {API_VERSION: None}

    def test_unknown_key(self, settings, crypto):
        config = _config(settings, crypto)
        with pytest.raises(UnknownConfigKeyError, match="bogusKey"):
            config.set("bogusKey", "x")

    def test_get_unknown_key(self, settings, crypto):
        with pytest.raises(UnknownConfigKeyError):
            _config(settings, crypto).get("bogusKey")

    def test_returns_full_contents(self, settings, crypto):
        config = _config(settings, crypto)
        config.set("defaultusername", "me@example.com")
        contents = config.set("restDeploy", "true")
        assert contents == {"defaultusername": "me@example.com", "restDeploy": "true"}

    def test_properties_without_validator_accept_anything(self, settings, crypto):
        config = _config(settings, crypto)
        config.set("isvDebuggerUrl", 12)
        assert config.get("isvDebuggerUrl") == 12

    @pytest.mark.parametrize(
        "value",
        [None, True, False, "true", "false", "41.0", "abc", "https://login.salesforce.com", 7],
    )
    def test_set_agrees_with_validators(self, settings, crypto, value):
        config = _config(settings, crypto)
        for prop in build_default_schema().properties:
            if prop.input is None:
                continue
            if prop.is_valid(value):
                config.set(prop.key, value)
                assert config.get(prop.key) == value
            else:
                with pytest.raises(InvalidConfigValueError):
                    config.set(prop.key, value)

    def test_unset_and_clear(self, settings, crypto):
        config = _config(settings, crypto)
        config.set("defaultusername", "a")
        config.set("defaultdevhubusername", "b")
        assert config.unset("defaultusername") is True
        config.clear()
        assert config.get_contents() == {}


class TestEncryption:
    def test_encrypted_on_disk_plaintext_in_memory(self, settings, crypto):
        config = _config(settings, crypto)
        config.set(ISV_DEBUGGER_SID, "sid-123")
        config.set("defaultusername", "me")

        assert config.write() == {ISV_DEBUGGER_SID: "sid-123", "defaultusername": "me"}

        stored = _on_disk(config)
        assert stored[ISV_DEBUGGER_SID].startswith(FakeCrypto.PREFIX)
        assert stored["defaultusername"] == "me"
        assert config.get(ISV_DEBUGGER_SID) == "sid-123"

    @pytest.mark.parametrize("value", [12345, 1.5, True])
    def test_encrypted_property_rejects_non_string(self, settings, crypto, value):
        config = _config(settings, crypto)
        with pytest.raises(InvalidConfigValueError, match=ISV_DEBUGGER_SID):
            config.set(ISV_DEBUGGER_SID, value)
        assert config.get_contents() == {}

    def test_encrypted_value_keeps_type_across_cycle(self, settings, crypto):
        config = _config(settings, crypto)
        config.set(ISV_DEBUGGER_SID, "12345")
        config.write()
        assert config.get(ISV_DEBUGGER_SID) == "12345"
        assert _config(settings, crypto).read() == {ISV_DEBUGGER_SID: "12345"}

    def test_round_trip(self, settings, crypto):
        contents = {ISV_DEBUGGER_SID: "sid-123", API_VERSION: "42.0", "restDeploy": False}
        _config(settings, crypto).write(contents)
        assert _config(settings, crypto).read() == contents

    def test_read_is_idempotent(self, settings, crypto):
        _config(settings, crypto).write({ISV_DEBUGGER_SID: "sid-123"})
        config = _config(settings, crypto)
        assert config.read() == config.read()

    def test_crypto_closed_after_each_cycle(self, settings, crypto):
        config = _config(settings, crypto)
        config.write({ISV_DEBUGGER_SID: "sid-123"})
        assert not crypto.is_open
        config.read()
        assert not crypto.is_open
        assert crypto.created == crypto.closed == 2

    def test_no_crypto_without_encrypted_entries(self, settings, crypto):
        config = _config(settings, crypto)
        config.write({"defaultusername": "me", API_VERSION: "41.0"})
        config.read()
        assert crypto.created == 0
        assert crypto.encrypt_calls == crypto.decrypt_calls == 0

    def test_unset_encrypted_value_skips_crypto(self, settings, crypto):
        config = _config(settings, crypto)
        config.write({ISV_DEBUGGER_SID: None})
        assert crypto.created == 0
        assert _on_disk(config) == {ISV_DEBUGGER_SID: None}

    def test_decrypt_failure_still_closes_crypto(self, settings, crypto):
        config = _config(settings, crypto)
        config.path.parent.mkdir(parents=True)
        config.path.write_text(json.dumps({ISV_DEBUGGER_SID: "plain"}), encoding="utf-8")
        with pytest.raises(CryptoError):
            config.read()
        assert not crypto.is_open
        assert crypto.closed == 1

    def test_failed_write_restores_plaintext(self, settings, crypto):
        config = _config(settings, crypto)
        config.path.mkdir(parents=True)
        config.set(ISV_DEBUGGER_SID, "sid-123")
        with pytest.raises(OSError):
            config.write()
        assert config.get(ISV_DEBUGGER_SID) == "sid-123"
        assert not crypto.is_open

    def test_unknown_keys_on_disk_pass_through(self, settings, crypto):
        config = _config(settings, crypto)
        config.path.parent.mkdir(parents=True)
        config.path.write_text(json.dumps({"legacyKey": "kept"}), encoding="utf-8")
        assert config.read() == {"legacyKey": "kept"}
        config.write()
        assert _on_disk(config) == {"legacyKey": "kept"}

    def test_fernet_by_default(self, settings):
        config = Config.create(Config.get_default_options(True), settings=settings)
        config.write({ISV_DEBUGGER_SID: "sid-123"})

        assert (settings.global_state_dir / KEY_FILE_NAME).is_file()
        assert _on_disk(config)[ISV_DEBUGGER_SID] != "sid-123"
        fresh = Config.create(Config.get_default_options(True), settings=settings)
        assert fresh.read() == {ISV_DEBUGGER_SID: "sid-123"}

    def test_no_key_file_without_encrypted_entries(self, settings):
        Config.create(Config.get_default_options(True), settings=settings).write({"defaultusername": "me"})
        assert not (settings.global_state_dir / KEY_FILE_NAME).exists()


class TestTransforms:
    def test_pure_and_selective(self):
        schema = build_default_schema()
        crypto = FakeCrypto().factory()
        original = {ISV_DEBUGGER_SID: "sid", "defaultusername": "me", "other": "x"}

        encrypted = apply_encryption(original, schema, crypto)

        assert original == {ISV_DEBUGGER_SID: "sid", "defaultusername": "me", "other": "x"}
        assert encrypted[ISV_DEBUGGER_SID] != "sid"
        assert encrypted["defaultusername"] == "me"
        assert apply_decryption(encrypted, schema, crypto) == original

    def test_no_calls_when_nothing_flagged(self):
        crypto = FakeCrypto().factory()
        apply_encryption({"defaultusername": "me"}, build_default_schema(), crypto)
        assert crypto.encrypt_calls == 0


class TestClassHelpers:
    def test_default_options_use_config_file_name(self):
        options = Config.get_default_options(True)
        assert options == ConfigFile.get_default_options(True, "cliconf-config.json")
        assert options.is_state is True
        assert Config.get_default_options(filename="other.json").filename == "other.json"

    def test_update_sets_and_persists(self, settings, crypto):
        contents = Config.update(True, ISV_DEBUGGER_SID, "sid", settings=settings, crypto_factory=crypto.factory)
        assert contents == {ISV_DEBUGGER_SID: "sid"}
        assert _config(settings, crypto).read() == {ISV_DEBUGGER_SID: "sid"}

    def test_update_none_deletes(self, settings, crypto):
        Config.update(False, "defaultusername", "me", settings=settings, crypto_factory=crypto.factory)
        contents = Config.update(False, "defaultusername", None, settings=settings, crypto_factory=crypto.factory)
        assert contents == {}

    def test_update_validates(self, settings, crypto):
        with pytest.raises(InvalidConfigValueError):
            Config.update(True, API_VERSION, "abc", settings=settings, crypto_factory=crypto.factory)
        with pytest.raises(UnknownConfigKeyError):
            Config.update(True, "bogusKey", None, settings=settings, crypto_factory=crypto.factory)

    def test_clear_all(self, settings, crypto):
        global_config = _config(settings, crypto, is_global=True)
        local_config = _config(settings, crypto, is_global=False)
        global_config.write({"defaultusername": "g"})
        local_config.write({"defaultusername": "l"})

        Config.clear_all(settings=settings, crypto_factory=crypto.factory)

        assert _on_disk(global_config) == {}
        assert _on_disk(local_config) == {}

    def test_unlink(self, settings, crypto):
        config = _config(settings, crypto)
        config.write()
        config.unlink()
        assert not config.exists()


def test_org_defaults():
    assert OrgDefault.list() == ["defaultdevhubusername", "defaultusername"]
