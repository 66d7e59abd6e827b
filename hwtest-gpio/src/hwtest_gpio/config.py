"""Configuration for the GPIO controller.

Example YAML:
    gpio:
      sysfs_root: "/sys/class/gpio"
      cpuinfo_path: "/proc/cpuinfo"
      poll_interval: 0.1
      mode: board
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hwtest_gpio.resolver import NumberingMode
from hwtest_gpio.revision import DEFAULT_CPUINFO_PATH
from hwtest_gpio.sysfs import DEFAULT_SYSFS_ROOT

_MODE_NAMES = {
    "board": NumberingMode.LOGICAL,
    "rpi": NumberingMode.LOGICAL,
    NumberingMode.LOGICAL.value: NumberingMode.LOGICAL,
    "bcm": NumberingMode.PHYSICAL,
    NumberingMode.PHYSICAL.value: NumberingMode.PHYSICAL,
}


@dataclass(frozen=True)
class GpioConfig:
    """Settings for a GpioController.

    Attributes:
        sysfs_root: Root of the sysfs GPIO class directory.
        cpuinfo_path: System identity file holding the board revision.
        poll_interval: Change watch poll interval in seconds.
        mode: Numbering mode the controller starts in.
    """

    sysfs_root: Path = field(default=DEFAULT_SYSFS_ROOT)
    cpuinfo_path: Path = field(default=DEFAULT_CPUINFO_PATH)
    poll_interval: float = 0.1
    mode: NumberingMode = NumberingMode.LOGICAL

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if not isinstance(self.mode, NumberingMode):
            raise ValueError(f"mode must be a NumberingMode, got {self.mode!r}")


def parse_mode_name(name: str) -> NumberingMode:
    """Return the numbering mode for a configuration name.

    Accepts "board"/"rpi"/"mode_rpi" and "bcm"/"mode_bcm".

    Raises:
        ValueError: If the name is not recognised.
    """
    mode = _MODE_NAMES.get(str(name).lower())
    if mode is None:
        raise ValueError(f"Unknown numbering mode: {name}")
    return mode


def load_gpio_config(path: str | Path) -> GpioConfig:
    """Load GPIO configuration from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed GpioConfig. Missing keys keep their defaults.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the file is not a mapping or a value is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"GPIO config not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return GpioConfig()
    if not isinstance(data, dict):
        raise ValueError("GPIO config must be a YAML mapping")

    gpio_data = data.get("gpio", {})
    if not isinstance(gpio_data, dict):
        raise ValueError("gpio section must be a mapping")

    kwargs: dict[str, Any] = {}
    if "sysfs_root" in gpio_data:
        kwargs["sysfs_root"] = Path(gpio_data["sysfs_root"])
    if "cpuinfo_path" in gpio_data:
        kwargs["cpuinfo_path"] = Path(gpio_data["cpuinfo_path"])
    if "poll_interval" in gpio_data:
        try:
            kwargs["poll_interval"] = float(gpio_data["poll_interval"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid poll_interval: {gpio_data['poll_interval']!r}") from exc
    if "mode" in gpio_data:
        kwargs["mode"] = parse_mode_name(gpio_data["mode"])

    return GpioConfig(**kwargs)
