"""Sources of font binaries keyed by an identifier."""

from __future__ import annotations

import abc
import os
from pathlib import Path

from iftkit.font_data import FontData


class FontProvider(abc.ABC):
    """Provides font binaries associated with an id."""

    @abc.abstractmethod
    def get_font(self, font_id: str) -> FontData:
        """Load the font for ``font_id``; raise FileNotFoundError if unknown."""


class FileFontProvider(FontProvider):
    """Loads fonts from files; the id is appended to the base directory."""

    def __init__(self, base_directory: str | os.PathLike) -> None:
        self.base_directory = os.fsdecode(base_directory)

    def get_font(self, font_id: str) -> FontData:
        path = self.base_directory + font_id
        try:
            data = Path(path).read_bytes()
        except OSError:
            data = b""
        if not data:
            raise FileNotFoundError(f"{path} does not exist.")
        return FontData(data)