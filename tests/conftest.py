import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

TOOL_DIR = Path(__file__).resolve().parent.parent
if str(TOOL_DIR) not in sys.path:
    sys.path.insert(0, str(TOOL_DIR))

import dumpoffsets  # noqa: E402


@pytest.fixture
def memory_xml(tmp_path: Path) -> Path:
    path = tmp_path / "Memory.xml"
    path.write_text("<memory-layouts />\n", encoding="utf-8")
    return path


@pytest.fixture
def make_args(memory_xml: Path) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "memory_xml": memory_xml,
            "platform": None,
            "version": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_source() -> Callable[[str], str]:
    def _make_source(inner_xml: str) -> str:
        return f"<memory-layouts>{inner_xml}</memory-layouts>"

    return _make_source


@pytest.fixture
def make_root(
    make_source: Callable[[str], str],
) -> Callable[[str], dumpoffsets.RawNode]:
    def _make_root(inner_xml: str) -> dumpoffsets.RawNode:
        return dumpoffsets.parse_definitions(make_source(inner_xml))

    return _make_root


@pytest.fixture
def make_entry() -> Callable[..., dumpoffsets.VersionEntry]:
    def _make_entry(
        label: str,
        *declarations: dumpoffsets.OffsetKind,
        platform: str = "p",
        inherits_from: str | None = None,
    ) -> dumpoffsets.VersionEntry:
        return dumpoffsets.VersionEntry(
            identity=dumpoffsets.VersionIdentity(platform, label),
            pointer_width=dumpoffsets.pointer_width_for_platform(platform),
            declarations=declarations,
            inherits_from=inherits_from,
        )

    return _make_entry


@pytest.fixture
def load_registry(
    make_source: Callable[[str], str],
) -> Callable[[str], dumpoffsets.VersionRegistry]:
    def _load_registry(inner_xml: str) -> dumpoffsets.VersionRegistry:
        return dumpoffsets.VersionRegistry().load_all(make_source(inner_xml))

    return _load_registry
