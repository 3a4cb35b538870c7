import pytest

from iftkit.file_font_provider import FileFontProvider, FontProvider


@pytest.fixture
def provider(tmp_path):
    (tmp_path / "font.txt").write_bytes(b"a font\n")
    (tmp_path / "empty.txt").write_bytes(b"")
    return FileFontProvider(f"{tmp_path}/")


def test_load_font(provider):
    font = provider.get_font("font.txt")
    assert bytes(font) == b"a font\n"


def test_font_not_found(provider):
    with pytest.raises(FileNotFoundError):
        provider.get_font("nothere.txt")


def test_empty_file_counts_as_missing(provider):
    with pytest.raises(FileNotFoundError):
        provider.get_font("empty.txt")


def test_id_is_appended_to_base_directory(tmp_path):
    (tmp_path / "prefix-font.txt").write_bytes(b"a font\n")
    provider = FileFontProvider(f"{tmp_path}/prefix-")
    assert bytes(provider.get_font("font.txt")) == b"a font\n"


def test_font_provider_is_abstract():
    with pytest.raises(TypeError):
        FontProvider()