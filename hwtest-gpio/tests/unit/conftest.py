"""Shared fixtures for hwtest-gpio unit tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from hwtest_gpio.config import GpioConfig
from hwtest_gpio.controller import GpioController

from fakes import FakeSysfsGpio


CPUINFO_TEMPLATE = textwrap.dedent("""\
    processor\t: 0
    model name\t: ARMv6-compatible processor rev 7 (v6l)
    BogoMIPS\t: 697.95
    Features\t: half thumb fastmult vfp edsp java tls
    CPU implementer\t: 0x41
    CPU revision\t: 7

    Hardware\t: BCM2708
    Revision\t: {revision}
    Serial\t\t: 00000000a1b2c3d4
    """)


@pytest.fixture
def make_cpuinfo(tmp_path: Path) -> Callable[[str], Path]:
    """Return a factory writing a cpuinfo file with the given revision code."""

    def _make(revision: str) -> Path:
        path = tmp_path / f"cpuinfo_{revision}"
        path.write_text(CPUINFO_TEMPLATE.format(revision=revision))
        return path

    return _make


@pytest.fixture
def cpuinfo_rev2(make_cpuinfo: Callable[[str], Path]) -> Path:
    """cpuinfo of a revision 2 Model B board."""
    return make_cpuinfo("000e")


@pytest.fixture
def fake_sysfs() -> FakeSysfsGpio:
    """Fresh in-memory pin-control filesystem."""
    return FakeSysfsGpio()


@pytest.fixture
def controller(fake_sysfs: FakeSysfsGpio, cpuinfo_rev2: Path) -> GpioController:
    """Controller on a revision 2 board with a fast change watch."""
    config = GpioConfig(cpuinfo_path=cpuinfo_rev2, poll_interval=0.01)
    return GpioController(config, sysfs=fake_sysfs)
