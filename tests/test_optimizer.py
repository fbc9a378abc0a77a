"""Tests for the platform tuning interface."""

from __future__ import annotations

import sys

from syscleaner.core.optimizer import (
    NoopNetworkTuner,
    NoopStartupOptimizer,
    RegistryNetworkTuner,
    RegistryStartupOptimizer,
    get_network_tuner,
    get_startup_optimizer,
)


class TestSelection:
    def test_windows_gets_registry_implementations(self):
        assert isinstance(get_startup_optimizer("win32"), RegistryStartupOptimizer)
        assert isinstance(get_network_tuner("win32"), RegistryNetworkTuner)

    def test_other_platforms_get_noop(self):
        assert isinstance(get_startup_optimizer("linux"), NoopStartupOptimizer)
        assert isinstance(get_network_tuner("darwin"), NoopNetworkTuner)


class TestNoop:
    def test_startup_reports_unsupported(self):
        result = NoopStartupOptimizer().optimize()
        assert not result.supported
        assert result.programs == []
        assert result.disabled == 0

    def test_network_reports_unsupported(self):
        result = NoopNetworkTuner().tune()
        assert not result.supported
        assert not result.throttling_disabled


class FakeKey:
    def __init__(self, values):
        self.values = values

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeWinreg:
    """Minimal in-memory stand-in for the winreg module."""

    HKEY_LOCAL_MACHINE = "HKLM"
    HKEY_CURRENT_USER = "HKCU"
    KEY_QUERY_VALUE = 1
    KEY_SET_VALUE = 2
    REG_DWORD = 4

    def __init__(self, hives):
        self.hives = hives
        self.set_values = {}

    def OpenKey(self, hive, path, reserved, access):
        if hive not in self.hives:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        return FakeKey(self.hives[hive])

    def EnumValue(self, key, index):
        items = list(key.values.items())
        if index >= len(items):
            raise OSError("No more data is available")
        name, data = items[index]
        return name, data, 1

    def DeleteValue(self, key, name):
        del key.values[name]

    def CreateKeyEx(self, hive, path, reserved, access):
        return FakeKey(self.set_values)

    def SetValueEx(self, key, name, reserved, kind, value):
        key.values[name] = value


class TestRegistryImplementations:
    def test_startup_disables_known_entries(self, monkeypatch):
        fake = FakeWinreg({
            "HKLM": {"OneDrive": "C:\\onedrive.exe", "SecurityHealth": "C:\\sec.exe"},
            "HKCU": {"Discord": "C:\\discord.exe"},
        })
        monkeypatch.setitem(sys.modules, "winreg", fake)

        result = RegistryStartupOptimizer().optimize()

        assert result.supported
        assert result.disabled == 2
        assert {p.name for p in result.programs if p.disabled} == {"OneDrive", "Discord"}
        assert fake.hives["HKLM"] == {"SecurityHealth": "C:\\sec.exe"}
        assert fake.hives["HKCU"] == {}

    def test_startup_skips_unreadable_hive(self, monkeypatch):
        fake = FakeWinreg({"HKCU": {"Spotify": "C:\\spotify.exe"}})
        monkeypatch.setitem(sys.modules, "winreg", fake)

        result = RegistryStartupOptimizer().optimize()

        assert [p.name for p in result.programs] == ["Spotify"]

    def test_network_tuner_sets_throttling_index(self, monkeypatch):
        fake = FakeWinreg({})
        monkeypatch.setitem(sys.modules, "winreg", fake)

        result = RegistryNetworkTuner().tune()

        assert result.throttling_disabled
        assert fake.set_values == {"NetworkThrottlingIndex": 0xFFFFFFFF}
