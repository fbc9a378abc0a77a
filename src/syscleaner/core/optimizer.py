"""Startup and network tuning behind a per-platform capability interface.

Only Windows has real implementations; every other platform gets no-op
implementations so callers never need to branch on the OS themselves.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

_RUN_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Run"
_SYSTEM_PROFILE_KEY = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion\Multimedia\SystemProfile"
_THROTTLING_DISABLED = 0xFFFFFFFF

UNNECESSARY_STARTUP = frozenset({
    "OneDrive", "Skype", "Spotify", "Discord",
    "Steam", "EpicGamesLauncher", "AdobeUpdater",
    "iTunes", "iTunesHelper",
})


@dataclass(slots=True)
class StartupProgram:
    """One autostart entry."""

    name: str
    command: str
    impact: str = "Low"
    disabled: bool = False


@dataclass(slots=True)
class StartupResult:
    programs: list[StartupProgram] = field(default_factory=list)
    disabled: int = 0
    supported: bool = True


@dataclass(slots=True)
class NetworkResult:
    throttling_disabled: bool = False
    supported: bool = True
    error: str = ""


class StartupOptimizer(ABC):
    """Removes autostart entries known to slow down boot."""

    @abstractmethod
    def optimize(self) -> StartupResult:
        """Disable unnecessary startup programs and report every entry seen."""


class NetworkTuner(ABC):
    """Applies network throughput tweaks."""

    @abstractmethod
    def tune(self) -> NetworkResult:
        """Apply the tweaks and report what changed."""


class NoopStartupOptimizer(StartupOptimizer):
    def optimize(self) -> StartupResult:
        log.info("Startup optimization is not supported on %s", sys.platform)
        return StartupResult(supported=False)


class NoopNetworkTuner(NetworkTuner):
    def tune(self) -> NetworkResult:
        log.info("Network tuning is not supported on %s", sys.platform)
        return NetworkResult(supported=False)


class RegistryStartupOptimizer(StartupOptimizer):
    """Deletes unnecessary values from the machine and user Run keys."""

    def optimize(self) -> StartupResult:
        import winreg

        result = StartupResult()
        for hive in (winreg.HKEY_LOCAL_MACHINE, winreg.HKEY_CURRENT_USER):
            try:
                key = winreg.OpenKey(hive, _RUN_KEY, 0, winreg.KEY_QUERY_VALUE | winreg.KEY_SET_VALUE)
            except OSError as e:
                log.debug("Cannot open Run key in hive %s: %s", hive, e)
                continue
            with key:
                for name, command in _read_values(key):
                    program = StartupProgram(name=name, command=str(command))
                    if name in UNNECESSARY_STARTUP:
                        program.impact = "High"
                        try:
                            winreg.DeleteValue(key, name)
                        except OSError as e:
                            log.warning("Could not disable startup entry %s: %s", name, e)
                        else:
                            program.disabled = True
                            result.disabled += 1
                    result.programs.append(program)
        return result


class RegistryNetworkTuner(NetworkTuner):
    """Turns off multimedia network throttling."""

    def tune(self) -> NetworkResult:
        import winreg

        try:
            key = winreg.CreateKeyEx(winreg.HKEY_LOCAL_MACHINE, _SYSTEM_PROFILE_KEY, 0, winreg.KEY_SET_VALUE)
            with key:
                winreg.SetValueEx(key, "NetworkThrottlingIndex", 0, winreg.REG_DWORD, _THROTTLING_DISABLED)
        except OSError as e:
            log.warning("Could not disable network throttling: %s", e)
            return NetworkResult(error=str(e))
        return NetworkResult(throttling_disabled=True)


def _read_values(key) -> list[tuple[str, object]]:
    import winreg

    values = []
    index = 0
    while True:
        try:
            name, data, _kind = winreg.EnumValue(key, index)
        except OSError:
            return values
        values.append((name, data))
        index += 1


def get_startup_optimizer(platform: str | None = None) -> StartupOptimizer:
    if (platform or sys.platform) == "win32":
        return RegistryStartupOptimizer()
    return NoopStartupOptimizer()


def get_network_tuner(platform: str | None = None) -> NetworkTuner:
    if (platform or sys.platform) == "win32":
        return RegistryNetworkTuner()
    return NoopNetworkTuner()
