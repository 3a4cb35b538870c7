"""Reading tables and metadata from OpenType font binaries, and building them."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping, Set
from typing import NamedTuple, Union

from iftkit.axis_range import AxisRange
from iftkit.byte_io import read_fixed, read_uint16, read_uint32
from iftkit.font_data import FontData
from iftkit.indexed_data_reader import IndexedDataReader

Tag = Union[int, str]


def string_to_tag(text: str) -> int:
    """The integer tag of the first four characters of ``text``."""
    raw = text.encode("latin-1")
    if len(raw) < 4:
        raise ValueError(f"a tag needs four characters, got {text!r}")
    return int.from_bytes(raw[:4], "big")


def tag_to_string(tag: int) -> str:
    """The four characters of an integer tag."""
    return (tag & 0xFFFFFFFF).to_bytes(4, "big").decode("latin-1")


def tags_to_strings(tags: Iterable[int]) -> list[str]:
    """Tags as strings; a set of tags is listed in ascending tag order."""
    if isinstance(tags, Set):
        tags = sorted(tags)
    return [tag_to_string(tag) for tag in tags]


IFT = string_to_tag("IFT ")
LOCA = string_to_tag("loca")
GLYF = string_to_tag("glyf")
HEAD = string_to_tag("head")
GVAR = string_to_tag("gvar")
CFF = string_to_tag("CFF ")
CFF2 = string_to_tag("CFF2")
GSUB = string_to_tag("GSUB")
GPOS = string_to_tag("GPOS")
CMAP = string_to_tag("cmap")
FVAR = string_to_tag("fvar")

_TRUETYPE_VERSION = 0x00010000
_CFF_VERSION = string_to_tag("OTTO")

# Layout features a subsetter keeps by default; everything else is optional.
DEFAULT_LAYOUT_FEATURES = frozenset(
    string_to_tag(name)
    for name in (
        "rvrn", "ccmp", "liga", "locl", "mark", "mkmk", "rlig",
        "frac", "numr", "dnom",
        "calt", "clig", "curs", "kern", "rclt",
        "valt", "vert", "vkrn", "vpal", "vrt2",
        "ltra", "ltrm", "rtla", "rtlm",
        "rand", "jalt",
        "chws", "vchw", "halt", "vhal",
        "Harf", "HARF", "Buzz", "BUZZ",
        "init", "medi", "fina", "isol", "med2", "fin2", "fin3",
        "cswh", "mset", "stch",
        "ljmo", "vjmo", "tjmo",
        "abvs", "blws", "abvm", "blwm",
        "nukt", "akhn", "rphf", "rkrf", "pref", "blwf", "half",
        "abvf", "pstf", "cfar", "vatu", "cjct", "pres", "psts",
        "haln", "dist",
    )
)

# Preferred cmap subtables as (platform id, encoding id), best first.
_CMAP_PREFERENCE = (
    (3, 0),
    (3, 10), (0, 6), (0, 4),
    (3, 1), (0, 3), (0, 2), (0, 1), (0, 0),
)
_UNICODE_MAX = 0x10FFFF


class _TableRecord(NamedTuple):
    tag: int
    checksum: int
    offset: int
    length: int


def _as_tag(tag: Tag) -> int:
    return string_to_tag(tag) if isinstance(tag, str) else int(tag)


def _table_records(data: bytes) -> list[_TableRecord]:
    if len(data) < 12:
        return []
    num_tables = read_uint16(data[4:])
    end = 12 + 16 * num_tables
    if end > len(data):
        return []
    return [_TableRecord(*fields) for fields in struct.iter_unpack(">IIII", data[12:end])]


def _table(data: bytes, tag: int) -> bytes:
    for record in _table_records(data):
        if record.tag == tag:
            return data[record.offset : record.offset + record.length]
    return b""


def table_data(font, tag: Tag) -> FontData:
    """The bytes of table ``tag``; empty when the font does not have it."""
    return FontData(_table(bytes(font), _as_tag(tag)))


def _checksum(data: bytes) -> int:
    padded = data + b"\0" * (-len(data) % 4)
    return sum(value for (value,) in struct.iter_unpack(">I", padded)) & 0xFFFFFFFF


def build_font(tables: Mapping[Tag, bytes]) -> FontData:
    """Assemble an sfnt font binary holding ``tables``."""
    entries = sorted((_as_tag(tag), bytes(data)) for tag, data in tables.items())
    tags = [tag for tag, _ in entries]
    if len(set(tags)) != len(tags):
        raise ValueError("duplicate table tags")

    count = len(entries)
    version = _CFF_VERSION if CFF in tags or CFF2 in tags else _TRUETYPE_VERSION
    if count:
        entry_selector = count.bit_length() - 1
        search_range = 16 << entry_selector
        range_shift = count * 16 - search_range
    else:
        entry_selector = search_range = range_shift = 0
    header = struct.pack(
        ">IHHHH", version, count, search_range, entry_selector, range_shift
    )

    data_start = 12 + 16 * count
    records = bytearray()
    body = bytearray()
    for tag, data in entries:
        records += struct.pack(
            ">IIII", tag, _checksum(data), data_start + len(body), len(data)
        )
        body += data + b"\0" * (-len(data) % 4)
    return FontData(header + bytes(records) + bytes(body))


def loca(font) -> bytes:
    """The loca table; raises LookupError when there is none."""
    result = _table(bytes(font), LOCA)
    if not result:
        raise LookupError("loca table was not found.")
    return result


def has_long_loca(font) -> bool:
    """True when head declares 32 bit loca offsets."""
    head = _table(bytes(font), HEAD)
    return len(head) >= 52 and head[51] != 0


def has_wide_gvar(font) -> bool:
    """True when gvar declares 32 bit glyph variation offsets."""
    gvar = _table(bytes(font), GVAR)
    return len(gvar) >= 16 and bool(gvar[15] & 0x01)


def glyf_data(font, gid: int) -> bytes:
    """The glyf bytes of glyph ``gid``.

    Raises LookupError when loca is missing or the glyph is not in it, and
    ValueError when head or the offsets are invalid.
    """
    data = bytes(font)
    loca_table = loca(data)
    head = _table(data, HEAD)
    if len(head) < 52:
        raise ValueError("invalid head table, too short.")
    glyf = _table(data, GLYF)
    if head[51]:
        reader = IndexedDataReader(loca_table, glyf, 4, 1)
    else:
        reader = IndexedDataReader(loca_table, glyf, 2, 2)
    return reader.data_for(gid)


def gvar_data(font, gid: int) -> bytes:
    """The glyph variation data of glyph ``gid``.

    Raises LookupError when gvar or the glyph is missing and ValueError when
    gvar is malformed.
    """
    gvar = _table(bytes(font), GVAR)
    if not gvar:
        raise LookupError("gvar not in the font.")
    if len(gvar) < 20:
        raise ValueError("gvar table is too short.")

    glyph_count = read_uint16(gvar[12:])
    data_offset = read_uint32(gvar[16:])
    if data_offset > len(gvar):
        raise ValueError("gvar data offset is past the end of the table.")

    wide = bool(gvar[15] & 0x01)
    width = 4 if wide else 2
    offsets = gvar[20 : 20 + (glyph_count + 1) * width]
    reader = IndexedDataReader(offsets, gvar[data_offset:], width, 1 if wide else 2)
    return reader.data_for(gid)


def gvar_shared_tuple_count(font) -> int:
    """Number of shared tuples declared by gvar."""
    gvar = _table(bytes(font), GVAR)
    if not gvar:
        raise LookupError("gvar not in the font.")
    if len(gvar) < 8:
        raise ValueError("gvar table is too short.")
    return read_uint16(gvar[6:])


def _format4_mapping(sub: bytes) -> dict[int, int]:
    seg_count = read_uint16(sub[6:]) // 2
    ends_at = 14
    starts_at = ends_at + 2 * seg_count + 2
    deltas_at = starts_at + 2 * seg_count
    ranges_at = deltas_at + 2 * seg_count
    ends = struct.unpack_from(f">{seg_count}H", sub, ends_at)
    starts = struct.unpack_from(f">{seg_count}H", sub, starts_at)
    deltas = struct.unpack_from(f">{seg_count}H", sub, deltas_at)
    range_offsets = struct.unpack_from(f">{seg_count}H", sub, ranges_at)

    mapping: dict[int, int] = {}
    segments = zip(starts, ends, deltas, range_offsets)
    for segment, (start, end, delta, range_offset) in enumerate(segments):
        range_offset_pos = ranges_at + 2 * segment
        for cp in range(start, min(end, 0xFFFE) + 1):
            if range_offset == 0:
                gid = (cp + delta) & 0xFFFF
            else:
                pos = range_offset_pos + range_offset + 2 * (cp - start)
                if pos + 2 > len(sub):
                    continue
                gid = read_uint16(sub[pos:])
                if gid:
                    gid = (gid + delta) & 0xFFFF
            if gid:
                mapping[cp] = gid
    return mapping


def _groups_mapping(sub: bytes, constant: bool) -> dict[int, int]:
    num_groups = read_uint32(sub[12:])
    end = 16 + 12 * num_groups
    if end > len(sub):
        return {}
    mapping: dict[int, int] = {}
    for start, last, start_gid in struct.iter_unpack(">III", sub[16:end]):
        for cp in range(start, min(last, _UNICODE_MAX) + 1):
            gid = start_gid if constant else start_gid + (cp - start)
            if gid:
                mapping[cp] = gid
    return mapping


def _subtable_mapping(sub: bytes) -> dict[int, int]:
    fmt = read_uint16(sub)
    if fmt == 0:
        return {cp: gid for cp, gid in enumerate(sub[6:262]) if gid}
    if fmt == 4:
        return _format4_mapping(sub)
    if fmt == 6:
        first = read_uint16(sub[6:])
        count = read_uint16(sub[8:])
        gids = struct.unpack_from(f">{count}H", sub, 10)
        return {first + i: gid for i, gid in enumerate(gids) if gid}
    if fmt in (12, 13):
        return _groups_mapping(sub, constant=fmt == 13)
    return {}


def _nominal_mapping(data: bytes) -> dict[int, int]:
    cmap = _table(data, CMAP)
    if len(cmap) < 4:
        return {}
    num_tables = read_uint16(cmap[2:])
    end = 4 + 8 * num_tables
    if end > len(cmap):
        return {}
    subtables: dict[tuple[int, int], int] = {}
    for platform, encoding, offset in struct.iter_unpack(">HHI", cmap[4:end]):
        subtables.setdefault((platform, encoding), offset)
    for key in _CMAP_PREFERENCE:
        if key in subtables:
            try:
                return _subtable_mapping(cmap[subtables[key] :])
            except (ValueError, struct.error):
                return {}
    return {}


def to_codepoints_set(font) -> set[int]:
    """Codepoints the font's cmap maps to a glyph."""
    return set(_nominal_mapping(bytes(font)))


def gid_to_unicode_map(font) -> dict[int, int]:
    """Map glyph id to codepoint; for shared glyphs the highest codepoint wins."""
    mapping = _nominal_mapping(bytes(font))
    return {gid: cp for cp, gid in sorted(mapping.items())}


def get_tags(font) -> set[int]:
    """Tags of all tables in the font."""
    return {record.tag for record in _table_records(bytes(font))}


def get_ordered_tags(font) -> list[int]:
    """Table tags ordered by where each table's data starts in the file."""
    first_records: dict[int, _TableRecord] = {}
    for record in _table_records(bytes(font)):
        first_records.setdefault(record.tag, record)
    ordered = sorted(first_records.values(), key=lambda record: record.offset)
    return [record.tag for record in ordered]


def _layout_feature_tags(table: bytes) -> list[int]:
    if len(table) < 10:
        return []
    offset = read_uint16(table[6:])
    if not offset or offset + 2 > len(table):
        return []
    count = read_uint16(table[offset:])
    records = table[offset + 2 : offset + 2 + 6 * count]
    if len(records) < 6 * count:
        return []
    return [tag for tag, _ in struct.iter_unpack(">IH", records)]


def get_feature_tags(font) -> set[int]:
    """Feature tags listed in GSUB and GPOS."""
    data = bytes(font)
    return set(_layout_feature_tags(_table(data, GSUB))) | set(
        _layout_feature_tags(_table(data, GPOS))
    )


def get_non_default_feature_tags(font) -> set[int]:
    """Feature tags that a subsetter does not keep by default."""
    return get_feature_tags(font) - DEFAULT_LAYOUT_FEATURES


def get_design_space(font) -> dict[int, AxisRange]:
    """Map each fvar axis tag to the range of values it spans."""
    fvar = _table(bytes(font), FVAR)
    if len(fvar) < 16:
        return {}
    axes_offset = read_uint16(fvar[4:])
    axis_count = read_uint16(fvar[8:])
    axis_size = read_uint16(fvar[10:])
    axes_end = axes_offset + axis_count * axis_size
    if axis_size < 20 or axes_end > len(fvar):
        return {}

    result: dict[int, AxisRange] = {}
    for record_start in range(axes_offset, axes_end, axis_size):
        record = fvar[record_start : record_start + axis_size]
        tag = read_uint32(record)
        minimum = read_fixed(record[4:])
        default = read_fixed(record[8:])
        maximum = read_fixed(record[12:])
        result[tag] = AxisRange.range(min(minimum, default), max(maximum, default))
    return result