from collections.abc import Callable

import pytest

import dumpoffsets
from dumpoffsets import (
    ClassLayout,
    FunctionAddress,
    GlobalAddress,
    ResolvedVersion,
    VersionIdentity,
    VTable,
)

RegistryLoader = Callable[[str], dumpoffsets.VersionRegistry]


def _resolved(*offsets, platform: str = "p", **metadata) -> ResolvedVersion:
    return ResolvedVersion(
        identity=VersionIdentity(platform, "v1"),
        pointer_width=dumpoffsets.pointer_width_for_platform(platform),
        offsets=offsets,
        **metadata,
    )


@pytest.mark.parametrize(
    "value, width, expected",
    [
        (0x1000, 32, "0x00001000"),
        (0xDEADBEEF, 32, "0xDEADBEEF"),
        (0x1000, 64, "0x0000000000001000"),
    ],
)
def test_format_address_pads_to_pointer_width(
    value: int, width: int, expected: str
) -> None:
    assert dumpoffsets.format_address(value, width) == expected


def test_format_offsets_full_layout() -> None:
    version = _resolved(
        ClassLayout("unit", 0xD3C0A0, (("name", 0x0), ("id", 0x80))),
        FunctionAddress("update", 0x401000),
        VTable("unit", 0xD3C0A0, ("getName", "getId")),
        GlobalAddress("creature_vector", 0x0166ECB0),
        GlobalAddress("cursor", 0x10),
        ClassLayout("item"),
        platform="windows",
        inherits_from="v0",
        pe_timestamp=0x4B93ABF3,
        md5="0123456789abcdef0123456789abcdef",
    )

    assert dumpoffsets.format_offsets(version) == (
        "Version v1 (windows, 32-bit)\n"
        "  Inherits:     v0\n"
        "  PE timestamp: 0x4B93ABF3\n"
        "  MD5:          0123456789abcdef0123456789abcdef\n"
        "\n"
        "  Globals (2):\n"
        "    creature_vector  0x0166ECB0\n"
        "    cursor           0x00000010\n"
        "  Functions (1):\n"
        "    update  0x00401000\n"
        "  VTables (1):\n"
        "    unit  0x00D3C0A0\n"
        "      [0] getName\n"
        "      [1] getId\n"
        "  Classes (2):\n"
        "    unit  vtable 0x00D3C0A0\n"
        "      +0x0000 name\n"
        "      +0x0080 id\n"
        "    item  vtable -\n"
    )


def test_format_offsets_empty_version_prints_every_category() -> None:
    assert dumpoffsets.format_offsets(_resolved(platform="linux64")) == (
        "Version v1 (linux64, 64-bit)\n"
        "\n"
        "  Globals (0):\n"
        "  Functions (0):\n"
        "  VTables (0):\n"
        "  Classes (0):\n"
    )


def test_format_item_rejects_unknown_kind() -> None:
    with pytest.raises(TypeError, match="Unhandled offset kind: str"):
        dumpoffsets._format_item("not an offset", 0, 32)


def test_format_registry_separates_blocks_with_blank_line() -> None:
    first = _resolved(platform="p")
    second = _resolved(platform="q")

    text = dumpoffsets.format_registry((first, second))

    assert text == (
        dumpoffsets.format_offsets(first) + "\n" + dumpoffsets.format_offsets(second)
    )
    assert "\n\nVersion v1 (q, 32-bit)\n" in text


def test_base_and_child_end_to_end(load_registry: RegistryLoader) -> None:
    registry = load_registry(
        """
        <version label="base" platform="p">
            <global name="g_foo" address="0x1000"/>
        </version>
        <version label="child" platform="p" inherits-from="base">
            <function name="fn_bar" address="0x2000"/>
        </version>
        """
    )

    child = registry.get("p", "child")
    text = dumpoffsets.format_offsets(child)

    assert [(item.name, item.address) for item in child.offsets] == [
        ("g_foo", 0x1000),
        ("fn_bar", 0x2000),
    ]
    assert text.index("g_foo  0x00001000") < text.index("fn_bar  0x00002000")
    assert "  Inherits:     base\n" in text


def test_dump_is_byte_identical_across_loads(
    load_registry: RegistryLoader,
) -> None:
    inner_xml = """
        <version label="a" platform="p">
            <class name="unit"><field name="z" offset="8"/><field name="a" offset="4"/></class>
            <global name="zeta" address="2"/>
            <global name="alpha" address="1"/>
        </version>
        <version label="b" platform="p" inherits-from="a">
            <global name="alpha" address="3"/>
            <class name="unit"><field name="m" offset="12"/></class>
        </version>
    """

    first = dumpoffsets.format_registry(load_registry(inner_xml).all())
    second = dumpoffsets.format_registry(load_registry(inner_xml).all())

    assert first == second
    assert first.index("zeta") < first.index("alpha")
    assert "      +0x0008 z\n      +0x0004 a\n      +0x000C m\n" in first
