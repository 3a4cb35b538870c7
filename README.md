# iftkit

Low-level building blocks for working with incrementally transferred fonts.
Pure Python, no dependencies outside the standard library.

## What it contains

- `iftkit.sparse_bit_set`
  - `encode(values, branch_factor=None)` turns a set of integers in
    `0..MAX_VALUE` (`0xFFFFFFFE`) into a compact sparse bit set tree.
    Completely filled subtrees are written as a single zero node. With no
    branch factor, the one estimated to give the smallest encoding is chosen
    and an empty set encodes to `b""`; with an explicit branch factor an empty
    set encodes to `b"\x00"`, and `BF2` is upgraded to `BF4` when the values
    need a deeper tree than `BF2` allows. Values outside the range raise
    `ValueError`.
  - `decode(data)` returns `(ranges, rest)`: the members as a sorted list of
    disjoint `range` objects, and the bytes that follow the encoded set.
    Truncated data, or a tree deeper than its branch factor allows, raises
    `ValueError`.
- `iftkit.branch_factor.BranchFactor`: the four tree shapes `BF2`, `BF4`,
  `BF8` and `BF32`, with `node_size()`, `twig_size()`, their `log2` and bit
  mask variants, and `max_depth()`.
- `iftkit.bit_input_buffer.BitInputBuffer` and
  `iftkit.bit_output_buffer.BitOutputBuffer`: node-sized bit reading
  (`read()`, iteration, `remaining()`, `branch_factor`, `depth`) and writing
  (`append()`, `to_bytes()`) for the sparse bit set format.
- `iftkit.tree_layout`: the tree shape calculations behind encoding, such as
  `tree_depth_for`, `choose_branch_factor`, `find_filled_twigs` and
  `find_filled_nodes`.
- `iftkit.byte_io`: big-endian `read_*`/`write_*` functions for 8, 16, 24 and
  32 bit integers and 16.16 fixed point, `will_int_overflow`,
  `will_fixed_overflow`, and `write_checked(kind, value, message)`, which
  raises `ValueError(message)` when the value does not fit.
- `iftkit.indexed_data_reader.IndexedDataReader`: slices entries out of
  offset-indexed data such as `loca` + `glyf` or the `gvar` glyph array.
  `data_for(index)` raises `LookupError` for a missing entry and `ValueError`
  for invalid offsets.
- `iftkit.font_data.FontData`: an immutable holder for font bytes, with
  `len()`, `bytes()`, `empty()` and clipped `span(start, end)`.
- `iftkit.font_helper`: access to the tables of an OpenType font given as
  bytes or `FontData`: `table_data`, `build_font`, `loca`, `has_long_loca`,
  `has_wide_gvar`, `glyf_data`, `gvar_data`, `gvar_shared_tuple_count`,
  `gid_to_unicode_map`, `to_codepoints_set`, `get_tags`, `get_ordered_tags`,
  `get_feature_tags`, `get_non_default_feature_tags`, `get_design_space`, and
  the tag helpers `tag_to_string`, `string_to_tag` and `tags_to_strings`.
  Tags may be given as integers or four-character strings.
- `iftkit.axis_range.AxisRange`: a closed range on a design axis
  (`point`, `range`, `intersects`, `is_point`, `is_range`); a range whose end
  is before its start raises `ValueError`.
- `iftkit.compat_id.CompatId`: four uint32 values, serialised by
  `to_bytes()` as big-endian.
- `iftkit.file_font_provider`: the `FontProvider` interface and
  `FileFontProvider`, which loads `base_directory + font_id` and raises
  `FileNotFoundError` when the file is missing or empty.

## Installation

```
pip install iftkit
```

## Example

```python
from iftkit.branch_factor import BranchFactor
from iftkit.sparse_bit_set import decode, encode

data = encode({2, 33, 323}, BranchFactor.BF8)
ranges, rest = decode(data)
assert {value for r in ranges for value in r} == {2, 33, 323}
assert rest == b""
```

```python
from iftkit.font_helper import build_font, table_data

font = build_font({"abcd": b"table_1", "defg": b"table_2"})
assert bytes(table_data(font, "abcd")) == b"table_1"
```

## What it does not do

iftkit is a library only; it installs no commands. It does not compute or
apply binary patches between fonts, does not compress or decompress WOFF2,
does not subset fonts, and does not encode or extend incremental fonts. Its
font reading covers the table directory, `head`, `loca`, `glyf`, `gvar`,
`cmap`, `fvar` and the feature lists of `GSUB` and `GPOS`; it does not shape
text or rasterise glyphs.

## Running the tests

```
pip install iftkit[test]
pytest
```