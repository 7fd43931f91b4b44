"""Memory layout offset dumper.

Resolves the layered version entries of a Memory.xml definition file into
one offset table per build of the target executable and prints them.

Usage:
    python dumpoffsets.py --memory-xml Memory.xml
    python dumpoffsets.py --platform windows --version 0.31.25
"""

import argparse
import re
import sys
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

DEFAULT_MEMORY_XML = Path("Memory.xml")


# ===--- Identity ---=== #


class VersionIdentity(NamedTuple):
    platform: str
    label: str

    def __str__(self) -> str:
        return f"{self.label}@{self.platform}"


OffsetKey = tuple[str, str]

KIND_GLOBAL = "global"
KIND_FUNCTION = "function"
KIND_VTABLE = "vtable"
KIND_CLASS = "class"


# ===--- Errors ---=== #


class LayoutError(Exception):
    """Base class for every failure raised while loading a definition file.

    Subclasses pin a stable `code` so the driver can report failures without
    matching on message text.
    """

    code = "LAYOUT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(LayoutError):
    """Malformed markup. `line` and `column` are 1-based."""

    code = "PARSE_ERROR"

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"line {line}, column {column}: {message}")
        self.line = line
        self.column = column


class SchemaError(LayoutError):
    """Well-formed markup that does not describe a valid set of versions."""

    code = "SCHEMA_ERROR"

    def __init__(
        self,
        message: str,
        version_label: str | None = None,
        tag: str | None = None,
        attribute: str | None = None,
    ):
        if version_label is not None:
            message = f"version '{version_label}': {message}"
        super().__init__(message)
        self.version_label = version_label
        self.tag = tag
        self.attribute = attribute


class DanglingReferenceError(LayoutError):
    code = "DANGLING_REFERENCE"

    def __init__(self, referrer: VersionIdentity, reference: str):
        super().__init__(
            f"version '{referrer.label}' on platform '{referrer.platform}' "
            f"inherits from unknown version '{reference}'"
        )
        self.referrer = referrer
        self.reference = reference


class CycleError(LayoutError):
    code = "INHERITANCE_CYCLE"

    def __init__(self, path: tuple[VersionIdentity, ...]):
        chain = " -> ".join(str(identity) for identity in (*path, path[0]))
        super().__init__(f"inheritance cycle: {chain}")
        self.path = path


class NotFoundError(LayoutError):
    code = "VERSION_NOT_FOUND"

    def __init__(
        self, message: str, platform: str | None = None, label: str | None = None
    ):
        super().__init__(message)
        self.platform = platform
        self.label = label


# ===--- Offset kinds ---=== #


@dataclass(frozen=True)
class GlobalAddress:
    name: str
    address: int

    @property
    def key(self) -> OffsetKey:
        return (KIND_GLOBAL, self.name)


@dataclass(frozen=True)
class FunctionAddress:
    name: str
    address: int

    @property
    def key(self) -> OffsetKey:
        return (KIND_FUNCTION, self.name)


@dataclass(frozen=True)
class VTable:
    """Virtual method table of one class. A method's slot is its position."""

    class_name: str
    address: int
    methods: tuple[str, ...] = ()

    @property
    def key(self) -> OffsetKey:
        return (KIND_VTABLE, self.class_name)


@dataclass(frozen=True)
class ClassLayout:
    """Field displacements of one class, in declaration order."""

    class_name: str
    vtable_address: int | None = None
    fields: tuple[tuple[str, int], ...] = ()

    @property
    def key(self) -> OffsetKey:
        return (KIND_CLASS, self.class_name)


OffsetKind = GlobalAddress | FunctionAddress | VTable | ClassLayout


@dataclass(frozen=True)
class VersionEntry:
    """One <version> element as declared, before inheritance is applied.

    Attributes:
        identity: (platform, label) pair, unique across the registry.
        pointer_width: 32 or 64, derived from the platform tag.
        declarations: Locally declared offsets in document order.
        inherits_from: Label of the parent version on the same platform.
        pe_timestamp: PE header timestamp identifying a Windows build.
        md5: Lower-case hex digest identifying the executable.
    """

    identity: VersionIdentity
    pointer_width: int
    declarations: tuple[OffsetKind, ...] = ()
    inherits_from: str | None = None
    pe_timestamp: int | None = None
    md5: str | None = None

    @property
    def parent(self) -> VersionIdentity | None:
        if self.inherits_from is None:
            return None
        return VersionIdentity(self.identity.platform, self.inherits_from)


@dataclass(frozen=True)
class ResolvedVersion:
    """Offset table of one version merged with all of its ancestors.

    offsets holds exactly one value per (kind, name) key, ordered by the
    first declaration of that key anywhere along the inheritance chain.
    Build identifiers belong to the version itself and are not inherited.
    """

    identity: VersionIdentity
    pointer_width: int
    offsets: tuple[OffsetKind, ...]
    inherits_from: str | None = None
    pe_timestamp: int | None = None
    md5: str | None = None

    @property
    def label(self) -> str:
        return self.identity.label

    @property
    def platform(self) -> str:
        return self.identity.platform

    def get(self, kind: str, name: str) -> OffsetKind | None:
        for item in self.offsets:
            if item.key == (kind, name):
                return item
        return None

    def of_kind(self, kind: str) -> tuple[OffsetKind, ...]:
        return tuple(item for item in self.offsets if item.key[0] == kind)


# ===--- Definition parsing ---=== #


@dataclass
class RawNode:
    tag: str
    attributes: dict[str, str]
    children: tuple["RawNode", ...] = ()


_POSITION_SUFFIX_RE = re.compile(r": line \d+, column \d+$")


def parse_definitions(source_text: str) -> RawNode:
    """Parse definition markup into an untyped node tree.

    Text content and comments are dropped. Tags and attributes are kept as
    written, whether or not the builder understands them.

    Args:
        source_text: Complete contents of the definition file.

    Returns:
        The root node.

    Raises:
        ParseError: If the markup is not well-formed.
    """
    try:
        root = ET.fromstring(source_text)
    except ET.ParseError as err:
        line, column = err.position
        message = _POSITION_SUFFIX_RE.sub("", str(err))
        raise ParseError(message, line, column + 1) from err
    return _to_raw_node(root)


def _to_raw_node(element: ET.Element) -> RawNode:
    return RawNode(
        tag=element.tag,
        attributes=dict(element.attrib),
        children=tuple(_to_raw_node(child) for child in element),
    )


# ===--- Entry model ---=== #

VERSION_TAG = "version"

_PLATFORM_RE = re.compile(r"[A-Za-z][A-Za-z0-9_.-]*")
_HEX_RE = re.compile(r"0[xX][0-9A-Fa-f]+")
_DEC_RE = re.compile(r"[0-9]+")
_MD5_RE = re.compile(r"[0-9A-Fa-f]{32}")


def pointer_width_for_platform(platform: str) -> int:
    """Return 64 for platform tags ending in "64" (e.g. linux64), else 32."""
    return 64 if platform.endswith("64") else 32


def parse_unsigned(raw: str, bits: int) -> int:
    """Parse a 0x-prefixed hex or plain decimal literal bounded by `bits`.

    Raises:
        ValueError: On any other spelling or when the value does not fit.
    """
    text = raw.strip()
    if _HEX_RE.fullmatch(text):
        value = int(text, 16)
    elif _DEC_RE.fullmatch(text):
        value = int(text, 10)
    else:
        raise ValueError(f"'{raw}' is not a hexadecimal or decimal number")
    if value >= 1 << bits:
        raise ValueError(f"'{raw}' does not fit in {bits} bits")
    return value


def _required(node: RawNode, attribute: str, version_label: str | None) -> str:
    value = node.attributes.get(attribute, "").strip()
    if not value:
        raise SchemaError(
            f"<{node.tag}> is missing required attribute '{attribute}'",
            version_label=version_label,
            tag=node.tag,
            attribute=attribute,
        )
    return value


def _number(node: RawNode, attribute: str, bits: int, version_label: str) -> int:
    raw = _required(node, attribute, version_label)
    try:
        return parse_unsigned(raw, bits)
    except ValueError as err:
        raise SchemaError(
            f"<{node.tag}> attribute '{attribute}': {err}",
            version_label=version_label,
            tag=node.tag,
            attribute=attribute,
        ) from err


def _reject_children(node: RawNode, version_label: str) -> None:
    if node.children:
        raise SchemaError(
            f"<{node.tag}> does not accept child <{node.children[0].tag}>",
            version_label=version_label,
            tag=node.children[0].tag,
        )


def _build_global(node: RawNode, version_label: str, bits: int) -> GlobalAddress:
    _reject_children(node, version_label)
    return GlobalAddress(
        name=_required(node, "name", version_label),
        address=_number(node, "address", bits, version_label),
    )


def _build_function(node: RawNode, version_label: str, bits: int) -> FunctionAddress:
    _reject_children(node, version_label)
    return FunctionAddress(
        name=_required(node, "name", version_label),
        address=_number(node, "address", bits, version_label),
    )


def _child_names(
    node: RawNode, owner: str, child_tag: str, version_label: str
) -> list[tuple[RawNode, str]]:
    named: list[tuple[RawNode, str]] = []
    seen: set[str] = set()
    for child in node.children:
        if child.tag != child_tag:
            raise SchemaError(
                f"<{node.tag}> '{owner}' does not accept child <{child.tag}>",
                version_label=version_label,
                tag=child.tag,
            )
        _reject_children(child, version_label)
        name = _required(child, "name", version_label)
        if name in seen:
            raise SchemaError(
                f"<{node.tag}> '{owner}' declares {child_tag} '{name}' twice",
                version_label=version_label,
                tag=child_tag,
                attribute="name",
            )
        seen.add(name)
        named.append((child, name))
    return named


def _build_vtable(node: RawNode, version_label: str, bits: int) -> VTable:
    class_name = _required(node, "class", version_label)
    address = _number(node, "address", bits, version_label)
    named = _child_names(node, class_name, "method", version_label)
    methods = tuple(name for _, name in named)
    return VTable(class_name=class_name, address=address, methods=methods)


def _build_class(node: RawNode, version_label: str, bits: int) -> ClassLayout:
    class_name = _required(node, "name", version_label)
    vtable_address = None
    if "vtable" in node.attributes:
        vtable_address = _number(node, "vtable", bits, version_label)
    fields = tuple(
        (name, _number(child, "offset", bits, version_label))
        for child, name in _child_names(node, class_name, "field", version_label)
    )
    return ClassLayout(
        class_name=class_name, vtable_address=vtable_address, fields=fields
    )


_DECLARATION_BUILDERS = {
    KIND_GLOBAL: _build_global,
    KIND_FUNCTION: _build_function,
    KIND_VTABLE: _build_vtable,
    KIND_CLASS: _build_class,
}


def build_version_entry(node: RawNode) -> VersionEntry:
    """Convert one <version> node into a VersionEntry.

    Platform must be given explicitly on every version, even when the parent
    version declares one.

    Raises:
        SchemaError: On missing attributes, unknown child tags or bad numbers.
    """
    label = _required(node, "label", None)
    platform = _required(node, "platform", label)
    if not _PLATFORM_RE.fullmatch(platform):
        raise SchemaError(
            f"invalid platform tag '{platform}'",
            version_label=label,
            tag=VERSION_TAG,
            attribute="platform",
        )
    bits = pointer_width_for_platform(platform)

    inherits_from = None
    if "inherits-from" in node.attributes:
        inherits_from = _required(node, "inherits-from", label)

    pe_timestamp = None
    if "pe-timestamp" in node.attributes:
        pe_timestamp = _number(node, "pe-timestamp", 32, label)

    md5 = None
    if "md5" in node.attributes:
        md5 = _required(node, "md5", label)
        if not _MD5_RE.fullmatch(md5):
            raise SchemaError(
                f"md5 '{md5}' is not a 32 digit hex digest",
                version_label=label,
                tag=VERSION_TAG,
                attribute="md5",
            )
        md5 = md5.lower()

    declarations: list[OffsetKind] = []
    for child in node.children:
        builder = _DECLARATION_BUILDERS.get(child.tag)
        if builder is None:
            raise SchemaError(
                f"unknown offset element <{child.tag}>",
                version_label=label,
                tag=child.tag,
            )
        declarations.append(builder(child, label, bits))

    return VersionEntry(
        identity=VersionIdentity(platform, label),
        pointer_width=bits,
        declarations=tuple(declarations),
        inherits_from=inherits_from,
        pe_timestamp=pe_timestamp,
        md5=md5,
    )


def build_entries(root: RawNode) -> list[VersionEntry]:
    """Build every version entry under the root, in document order.

    Raises:
        SchemaError: On a non-version top-level element, a duplicate
            (platform, label) identity or a build identifier claimed by
            two versions.
    """
    entries: list[VersionEntry] = []
    seen: set[VersionIdentity] = set()
    timestamps: dict[int, VersionIdentity] = {}
    digests: dict[str, VersionIdentity] = {}

    for node in root.children:
        if node.tag != VERSION_TAG:
            raise SchemaError(
                f"unexpected top-level element <{node.tag}>", tag=node.tag
            )
        entry = build_version_entry(node)
        if entry.identity in seen:
            raise SchemaError(
                f"declared twice for platform '{entry.identity.platform}'",
                version_label=entry.identity.label,
                tag=VERSION_TAG,
                attribute="label",
            )
        seen.add(entry.identity)

        if entry.pe_timestamp is not None:
            owner = timestamps.setdefault(entry.pe_timestamp, entry.identity)
            if owner != entry.identity:
                raise SchemaError(
                    f"pe-timestamp 0x{entry.pe_timestamp:08X} already belongs to {owner}",
                    version_label=entry.identity.label,
                    tag=VERSION_TAG,
                    attribute="pe-timestamp",
                )
        if entry.md5 is not None:
            owner = digests.setdefault(entry.md5, entry.identity)
            if owner != entry.identity:
                raise SchemaError(
                    f"md5 {entry.md5} already belongs to {owner}",
                    version_label=entry.identity.label,
                    tag=VERSION_TAG,
                    attribute="md5",
                )
        entries.append(entry)

    return entries


# ===--- Inheritance resolution ---=== #

_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


def merge_declaration(existing: OffsetKind | None, incoming: OffsetKind) -> OffsetKind:
    """Combine a later declaration with the value already held for its key.

    Scalars are replaced. Class fields merge by name: known fields keep their
    position and take the new offset, new fields append. A vtable takes the
    new address and, when the new declaration lists methods, the new slot
    list.
    """
    if existing is None:
        return incoming
    if isinstance(incoming, ClassLayout) and isinstance(existing, ClassLayout):
        fields = dict(existing.fields)
        fields.update(incoming.fields)
        vtable_address = incoming.vtable_address
        if vtable_address is None:
            vtable_address = existing.vtable_address
        return ClassLayout(
            class_name=incoming.class_name,
            vtable_address=vtable_address,
            fields=tuple(fields.items()),
        )
    if isinstance(incoming, VTable) and isinstance(existing, VTable):
        return VTable(
            class_name=incoming.class_name,
            address=incoming.address,
            methods=incoming.methods or existing.methods,
        )
    return incoming


def apply_declarations(
    table: dict[OffsetKey, OffsetKind], declarations: tuple[OffsetKind, ...]
) -> None:
    # dict assignment keeps an existing key in place and appends new keys.
    for declaration in declarations:
        key = declaration.key
        table[key] = merge_declaration(table.get(key), declaration)


def check_references(entries: list[VersionEntry]) -> None:
    """Verify every inherits-from label names a version on the same platform.

    Raises:
        SchemaError: When the label exists only on other platforms.
        DanglingReferenceError: When no version carries the label at all.
    """
    known = {entry.identity for entry in entries}
    for entry in entries:
        parent = entry.parent
        if parent is None or parent in known:
            continue
        elsewhere = [
            identity.platform for identity in known if identity.label == parent.label
        ]
        if elsewhere:
            raise SchemaError(
                f"inherits from '{parent.label}' which exists only on platform "
                f"{', '.join(sorted(elsewhere))}, not '{parent.platform}'",
                version_label=entry.identity.label,
                tag=VERSION_TAG,
                attribute="inherits-from",
            )
        raise DanglingReferenceError(entry.identity, parent.label)


def inheritance_order(entries: list[VersionEntry]) -> list[VersionIdentity]:
    """Return every identity with ancestors ahead of descendants.

    Walks each entry's parent chain with a three-state marker per identity.
    Reaching an identity that is still in progress means the chain loops
    back on itself. Ties keep document order.

    Args:
        entries: Version entries in document order.

    Returns:
        Identities ordered so each parent precedes its children.

    Raises:
        SchemaError, DanglingReferenceError: From check_references.
        CycleError: With the identities forming the loop, in walk order.
    """
    check_references(entries)
    index = {entry.identity: entry for entry in entries}
    state: dict[VersionIdentity, int] = {}
    order: list[VersionIdentity] = []

    for entry in entries:
        path: list[VersionIdentity] = []
        cursor: VersionIdentity | None = entry.identity
        while cursor is not None and state.get(cursor, _UNVISITED) == _UNVISITED:
            state[cursor] = _IN_PROGRESS
            path.append(cursor)
            cursor = index[cursor].parent

        if cursor is not None and state[cursor] == _IN_PROGRESS:
            raise CycleError(tuple(path[path.index(cursor) :]))

        for identity in reversed(path):
            state[identity] = _DONE
            order.append(identity)

    return order


def resolve_inheritance(
    entries: list[VersionEntry],
) -> dict[VersionIdentity, ResolvedVersion]:
    """Merge every entry with its ancestor chain.

    The full graph is checked before any table is merged. Each identity is
    merged once, onto a copy of its parent's finished table.

    Args:
        entries: Version entries in document order.

    Returns:
        Resolved versions keyed by identity, iterating in document order.
    """
    index = {entry.identity: entry for entry in entries}
    tables: dict[VersionIdentity, dict[OffsetKey, OffsetKind]] = {}

    for identity in inheritance_order(entries):
        entry = index[identity]
        table = dict(tables[entry.parent]) if entry.parent is not None else {}
        apply_declarations(table, entry.declarations)
        tables[identity] = table

    return {
        entry.identity: ResolvedVersion(
            identity=entry.identity,
            pointer_width=entry.pointer_width,
            offsets=tuple(tables[entry.identity].values()),
            inherits_from=entry.inherits_from,
            pe_timestamp=entry.pe_timestamp,
            md5=entry.md5,
        )
        for entry in entries
    }


# ===--- Version registry ---=== #


class VersionRegistry:
    """Resolved versions of one definition source.

    load_all swaps in a new set only after parsing, building and resolving
    all succeed, so a failed load leaves the previous contents untouched.
    """

    def __init__(self) -> None:
        self._versions: dict[VersionIdentity, ResolvedVersion] = {}

    def load_all(self, source_text: str) -> "VersionRegistry":
        root = parse_definitions(source_text)
        entries = build_entries(root)
        self._versions = resolve_inheritance(entries)
        return self

    def load_file(self, path: Path) -> "VersionRegistry":
        return self.load_all(Path(path).read_text(encoding="utf-8"))

    def get(self, platform: str, label: str) -> ResolvedVersion:
        version = self._versions.get(VersionIdentity(platform, label))
        if version is None:
            raise NotFoundError(
                f"version '{label}' not found for platform '{platform}'",
                platform=platform,
                label=label,
            )
        return version

    def all(self) -> tuple[ResolvedVersion, ...]:
        return tuple(self._versions.values())

    def platforms(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(identity.platform for identity in self._versions))

    def find_by_pe_timestamp(self, value: int) -> ResolvedVersion:
        for version in self._versions.values():
            if version.pe_timestamp == value:
                return version
        raise NotFoundError(f"no version with pe-timestamp 0x{value:08X}")

    def find_by_md5(self, digest: str) -> ResolvedVersion:
        wanted = digest.strip().lower()
        for version in self._versions.values():
            if version.md5 == wanted:
                return version
        raise NotFoundError(f"no version with md5 {wanted}")

    def __len__(self) -> int:
        return len(self._versions)


# ===--- Offset printer ---=== #

CATEGORY_ORDER: tuple[tuple[str, str], ...] = (
    (KIND_GLOBAL, "Globals"),
    (KIND_FUNCTION, "Functions"),
    (KIND_VTABLE, "VTables"),
    (KIND_CLASS, "Classes"),
)


def format_address(value: int, pointer_width: int) -> str:
    """Render an address zero-padded to the pointer width (8 or 16 digits)."""
    return f"0x{value:0{pointer_width // 4}X}"


def _format_item(item: OffsetKind, name_width: int, pointer_width: int) -> list[str]:
    if isinstance(item, (GlobalAddress, FunctionAddress)):
        address = format_address(item.address, pointer_width)
        return [f"    {item.name.ljust(name_width)}  {address}"]
    if isinstance(item, VTable):
        address = format_address(item.address, pointer_width)
        lines = [f"    {item.class_name.ljust(name_width)}  {address}"]
        for slot, method in enumerate(item.methods):
            lines.append(f"      [{slot}] {method}")
        return lines
    if isinstance(item, ClassLayout):
        if item.vtable_address is None:
            vtable = "vtable -"
        else:
            vtable = f"vtable {format_address(item.vtable_address, pointer_width)}"
        lines = [f"    {item.class_name.ljust(name_width)}  {vtable}"]
        for name, offset in item.fields:
            lines.append(f"      +0x{offset:04X} {name}")
        return lines
    raise TypeError(f"Unhandled offset kind: {type(item).__name__}")


def format_offsets(version: ResolvedVersion) -> str:
    """Return the dump of one resolved version as a string.

    Output format:

        Version 0.31.25 (windows, 32-bit)
          Inherits:     0.31.24
          PE timestamp: 0x4B93ABF3

          Globals (1):
            creature_vector  0x0166ECB0
          Functions (0):
          VTables (1):
            unit  0x00D3C0A0
              [0] getName
          Classes (1):
            unit  vtable 0x00D3C0A0
              +0x0000 name

    Categories always appear in this order and always print their header.
    Items keep resolved order; names are padded to the widest in the category.

    Args:
        version: Resolved version to render.

    Returns:
        Formatted multi-line string including trailing newline.
    """
    lines = [f"Version {version.label} ({version.platform}, {version.pointer_width}-bit)"]
    if version.inherits_from is not None:
        lines.append(f"  Inherits:     {version.inherits_from}")
    if version.pe_timestamp is not None:
        lines.append(f"  PE timestamp: 0x{version.pe_timestamp:08X}")
    if version.md5 is not None:
        lines.append(f"  MD5:          {version.md5}")

    lines.append("")
    for kind, heading in CATEGORY_ORDER:
        items = version.of_kind(kind)
        lines.append(f"  {heading} ({len(items)}):")
        name_width = max((len(item.key[1]) for item in items), default=0)
        for item in items:
            lines.extend(_format_item(item, name_width, version.pointer_width))

    lines.append("")
    return "\n".join(lines)


def format_registry(versions: tuple[ResolvedVersion, ...]) -> str:
    """Join version dumps with one blank line between blocks."""
    return "\n".join(format_offsets(version) for version in versions)


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class DumpConfig:
    memory_xml: Path
    platform: str | None
    version: str | None


VALID_ERROR_CODES = {
    "PATH_NOT_FOUND",
    "VERSION_WITHOUT_PLATFORM",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def validate_path_exists(path: Path, flag: str) -> Path:
    if path.is_file():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        f"Pass the definition file explicitly: {flag} /path/to/Memory.xml",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print resolved memory offsets for every known build"
    )
    parser.add_argument("--memory-xml", type=Path, default=DEFAULT_MEMORY_XML)
    parser.add_argument("--platform", type=str, default=None)
    parser.add_argument("--version", type=str, default=None)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> DumpConfig:
    if args.version is not None and args.platform is None:
        raise ConfigError(
            "VERSION_WITHOUT_PLATFORM",
            "--version requires --platform.",
            "Version labels are only unique per platform; add --platform.",
        )
    return DumpConfig(
        memory_xml=validate_path_exists(args.memory_xml, "--memory-xml"),
        platform=args.platform,
        version=args.version,
    )


def build_config(argv: list[str] | None = None) -> DumpConfig:
    return validate_config(parse_args(argv))


# ===--- Main dump ---=== #


def select_versions(
    registry: VersionRegistry, config: DumpConfig
) -> tuple[ResolvedVersion, ...]:
    """Pick the versions to print for config.

    Raises:
        NotFoundError: For an unknown --version, or a --platform with no
            versions at all.
    """
    if config.version is not None:
        assert config.platform is not None  # validate_config guarantees this
        return (registry.get(config.platform, config.version),)
    if config.platform is None:
        return registry.all()
    selected = tuple(v for v in registry.all() if v.platform == config.platform)
    if not selected:
        raise NotFoundError(
            f"no versions for platform '{config.platform}'", platform=config.platform
        )
    return selected


def run_dump(config: DumpConfig) -> None:
    registry = VersionRegistry().load_file(config.memory_xml)
    print(format_registry(select_versions(registry, config)), end="")


def main(argv: list[str] | None = None) -> None:
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}", file=sys.stderr)
        if err.suggestion:
            print(f"Hint: {err.suggestion}", file=sys.stderr)
        raise SystemExit(1) from err

    try:
        run_dump(config)
    except LayoutError as err:
        print(f"Error [{err.code}]: {err.message}", file=sys.stderr)
        raise SystemExit(1) from err
    except OSError as err:
        print(f"Error: {err}", file=sys.stderr)
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
