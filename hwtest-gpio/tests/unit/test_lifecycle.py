"""Unit tests for the pin export lifecycle."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import pytest

from hwtest_gpio.errors import (
    GpioFilesystemError,
    InvalidArgumentError,
    UnmappedChannelError,
)
from hwtest_gpio.events import NotificationKind, Notifier
from hwtest_gpio.exported import ExportedPinSet
from hwtest_gpio.lifecycle import PinLifecycleManager, parse_direction
from hwtest_gpio.pin_io import PinIO
from hwtest_gpio.resolver import ChannelResolver, NumberingMode
from hwtest_gpio.revision import RevisionDetector
from hwtest_gpio.sysfs import Direction

from fakes import FakeSysfsGpio

LOGICAL = NumberingMode.LOGICAL


class _Harness:
    """Lifecycle manager wired to a fake filesystem, with recorded notifications."""

    def __init__(self, sysfs: FakeSysfsGpio, cpuinfo: Path) -> None:
        self.sysfs = sysfs
        self.exported = ExportedPinSet()
        self.notifier = Notifier()
        self.events: list[tuple[Any, ...]] = []
        for kind in NotificationKind:
            self.notifier.subscribe(kind, lambda *args, kind=kind: self.events.append((kind, *args)))
        self.manager = PinLifecycleManager(
            sysfs,
            ChannelResolver(RevisionDetector(cpuinfo)),
            self.exported,
            PinIO(sysfs, self.exported),
            self.notifier,
            0.01,
        )


@pytest.fixture
def harness(fake_sysfs: FakeSysfsGpio, cpuinfo_rev2: Path) -> _Harness:
    return _Harness(fake_sysfs, cpuinfo_rev2)


class TestParseDirection:
    def test_enum_and_strings(self) -> None:
        assert parse_direction(Direction.IN) is Direction.IN
        assert parse_direction("in") is Direction.IN
        assert parse_direction("out") is Direction.OUT

    @pytest.mark.parametrize("direction", ["IN", "input", "", None])
    def test_invalid_direction_raises(self, direction: object) -> None:
        with pytest.raises(InvalidArgumentError, match="invalid direction"):
            parse_direction(direction)  # type: ignore[arg-type]


class TestSetup:
    """Tests for PinLifecycleManager.setup."""

    @pytest.mark.asyncio
    async def test_exports_and_sets_direction(self, harness: _Harness) -> None:
        pin = await harness.manager.setup(11, Direction.OUT, LOGICAL)

        assert pin == "17"
        assert harness.sysfs.calls == [
            ("is_exported", "17"),
            ("export", "17"),
            ("set_direction", "17", "out"),
        ]
        assert harness.sysfs.pins["17"]["direction"] == "out"
        assert "17" in harness.exported
        assert harness.manager.watched_pins == ["17"]
        await harness.manager.destroy()

    @pytest.mark.asyncio
    async def test_emits_export_with_channel(self, harness: _Harness) -> None:
        await harness.manager.setup(11, Direction.IN, LOGICAL)
        assert harness.events == [(NotificationKind.EXPORT, 11)]
        await harness.manager.destroy()

    @pytest.mark.asyncio
    async def test_stale_export_is_unexported_first(self, harness: _Harness) -> None:
        harness.sysfs.preexport("17", value="1")

        await harness.manager.setup(11, Direction.IN, LOGICAL)

        assert harness.sysfs.ops() == [
            ("unexport", "17"),
            ("export", "17"),
            ("set_direction", "17", "in"),
        ]
        # Fresh export, not the stale value.
        assert harness.sysfs.pins["17"]["value"] == "0"
        await harness.manager.destroy()

    @pytest.mark.asyncio
    async def test_setup_twice_re_exports(self, harness: _Harness) -> None:
        await harness.manager.setup(11, Direction.OUT, LOGICAL)
        await harness.manager.setup(11, Direction.IN, LOGICAL)

        assert harness.sysfs.ops() == [
            ("export", "17"),
            ("set_direction", "17", "out"),
            ("unexport", "17"),
            ("export", "17"),
            ("set_direction", "17", "in"),
        ]
        assert harness.exported.pins() == ["17"]
        assert harness.manager.watched_pins == ["17"]
        await harness.manager.destroy()

    @pytest.mark.asyncio
    async def test_invalid_direction_touches_nothing(self, harness: _Harness) -> None:
        with pytest.raises(InvalidArgumentError):
            await harness.manager.setup(11, "sideways", LOGICAL)
        assert harness.sysfs.calls == []

    @pytest.mark.asyncio
    async def test_missing_channel_raises(self, harness: _Harness) -> None:
        with pytest.raises(InvalidArgumentError, match="Channel not specified"):
            await harness.manager.setup(None, Direction.OUT, LOGICAL)  # type: ignore[arg-type]
        assert harness.sysfs.calls == []

    @pytest.mark.asyncio
    async def test_unmapped_channel_raises(self, harness: _Harness) -> None:
        with pytest.raises(UnmappedChannelError):
            await harness.manager.setup(6, Direction.OUT, LOGICAL)
        assert harness.sysfs.calls == []

    @pytest.mark.asyncio
    async def test_failure_leaves_pin_unrecorded(self, harness: _Harness) -> None:
        harness.sysfs.fail_on.add("set_direction")

        with pytest.raises(GpioFilesystemError):
            await harness.manager.setup(11, Direction.OUT, LOGICAL)

        # The export step already happened and is not rolled back.
        assert "17" in harness.sysfs.pins
        assert "17" not in harness.exported
        assert harness.manager.watched_pins == []
        assert harness.events == []

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, harness: _Harness) -> None:
        harness.sysfs.fail_on.add("set_direction")
        with pytest.raises(GpioFilesystemError):
            await harness.manager.setup(11, Direction.OUT, LOGICAL)

        harness.sysfs.fail_on.clear()
        await harness.manager.setup(11, Direction.OUT, LOGICAL)

        assert "17" in harness.exported
        await harness.manager.destroy()


class TestChangeWatch:
    """Tests for change notifications from setup's watch."""

    @pytest.mark.asyncio
    @pytest.mark.timeout(5)
    async def test_change_emits_channel_and_value(self, harness: _Harness) -> None:
        changed = asyncio.Event()
        harness.notifier.subscribe(NotificationKind.CHANGE, lambda ch, v: changed.set())

        await harness.manager.setup(11, Direction.IN, LOGICAL)
        await asyncio.sleep(0.05)
        harness.sysfs.set_value("17", "1")
        await asyncio.wait_for(changed.wait(), timeout=2.0)

        assert (NotificationKind.CHANGE, 11, True) in harness.events
        await harness.manager.destroy()

    @pytest.mark.asyncio
    @pytest.mark.timeout(5)
    async def test_no_change_after_unexport(self, harness: _Harness) -> None:
        await harness.manager.setup(11, Direction.IN, LOGICAL)
        await asyncio.sleep(0.05)

        await harness.manager.unexport("17")
        harness.sysfs.preexport("17")
        harness.sysfs.set_value("17", "1")
        await asyncio.sleep(0.05)

        assert all(event[0] is not NotificationKind.CHANGE for event in harness.events)
        assert harness.manager.watched_pins == []

    @pytest.mark.asyncio
    async def test_read_failure_is_logged(
        self, harness: _Harness, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="hwtest_gpio.lifecycle"):
            await harness.manager._on_value_change(11, "17")  # pylint: disable=protected-access

        assert "Failed to read channel 11" in caplog.text
        assert harness.events == []


class TestUnexportAndDestroy:
    """Tests for unexport, destroy and reset."""

    @pytest.mark.asyncio
    async def test_unexport_forgets_pin(self, harness: _Harness) -> None:
        await harness.manager.setup(11, Direction.OUT, LOGICAL)
        await harness.manager.unexport("17")

        assert "17" not in harness.exported
        assert "17" not in harness.sysfs.pins

    @pytest.mark.asyncio
    async def test_destroy_reverse_insertion_order(self, harness: _Harness) -> None:
        for channel in (11, 12, 15):
            await harness.manager.setup(channel, Direction.OUT, LOGICAL)
        harness.sysfs.calls.clear()

        await harness.manager.destroy()

        assert harness.sysfs.ops() == [("unexport", "22"), ("unexport", "18"), ("unexport", "17")]
        assert len(harness.exported) == 0
        assert harness.manager.watched_pins == []
        assert harness.sysfs.pins == {}

    @pytest.mark.asyncio
    async def test_destroy_continues_after_failure(self, harness: _Harness) -> None:
        for channel in (11, 12, 15):
            await harness.manager.setup(channel, Direction.OUT, LOGICAL)
        # Someone else unexported GPIO18.
        del harness.sysfs.pins["18"]

        with pytest.raises(GpioFilesystemError, match="1 of 3 pins"):
            await harness.manager.destroy()

        assert harness.sysfs.pins == {}
        assert harness.exported.pins() == ["18"]
        assert harness.manager.watched_pins == []

    @pytest.mark.asyncio
    async def test_failed_unexport_is_retried_by_destroy(self, harness: _Harness) -> None:
        await harness.manager.setup(11, Direction.OUT, LOGICAL)
        harness.sysfs.fail_on.add("unexport")

        with pytest.raises(GpioFilesystemError):
            await harness.manager.unexport("17")

        # Still exported in the kernel, so still recorded.
        assert "17" in harness.sysfs.pins
        assert "17" in harness.exported
        assert harness.manager.watched_pins == []

        harness.sysfs.fail_on.clear()
        await harness.manager.destroy()

        assert harness.sysfs.pins == {}
        assert len(harness.exported) == 0

    @pytest.mark.asyncio
    @pytest.mark.timeout(5)
    async def test_destroy_unexports_pin_with_crashed_watch(
        self, harness: _Harness, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        await harness.manager.setup(11, Direction.IN, LOGICAL)
        await harness.manager.setup(12, Direction.IN, LOGICAL)

        async def broken_read(pin: str) -> str:
            raise RuntimeError(f"cannot read pin {pin}")

        monkeypatch.setattr(harness.sysfs, "read_value", broken_read)
        await asyncio.sleep(0.05)

        await harness.manager.destroy()

        assert harness.sysfs.ops()[-2:] == [("unexport", "18"), ("unexport", "17")]
        assert harness.sysfs.pins == {}
        assert len(harness.exported) == 0

    @pytest.mark.asyncio
    async def test_destroy_empty(self, harness: _Harness) -> None:
        await harness.manager.destroy()
        assert harness.sysfs.calls == []

    @pytest.mark.asyncio
    async def test_reset_does_not_touch_filesystem(self, harness: _Harness) -> None:
        await harness.manager.setup(11, Direction.OUT, LOGICAL)
        harness.sysfs.calls.clear()

        harness.manager.reset()
        await asyncio.sleep(0)

        assert len(harness.exported) == 0
        assert harness.manager.watched_pins == []
        assert harness.sysfs.calls == []
        assert "17" in harness.sysfs.pins
