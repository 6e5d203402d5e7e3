"""
Package Archive Store

In-memory view of an Office package (a zip container of XML parts). Parts are read
once, replaced individually, and serialized once. Entries keep their original
order and ZipInfo, and parts that were never replaced are written back with their
original bytes.
"""

import io
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from longlist.contexts.rendering.logger import _log_debug, log_archive_written
from longlist.contexts.templating.exceptions import SerializationError, TemplateLoadError

PART_ENCODING = "utf-8"


def _clone_info(info: zipfile.ZipInfo) -> zipfile.ZipInfo:
    """Fresh ZipInfo with the same name, timestamp, compression and attributes."""
    clone = zipfile.ZipInfo(info.filename, date_time=info.date_time)
    clone.compress_type = info.compress_type
    clone.external_attr = info.external_attr
    clone.create_system = info.create_system
    return clone


class PackageArchive:
    """
    Ordered collection of named parts backed by a zip container.

    Factory methods:
        from_path(path) - Open a package file
        from_bytes(data) - Open a package held in memory

    Example:
        archive = PackageArchive.from_path(Path("template.pptx"))
        xml = archive.read_text("ppt/slides/slide1.xml")
        archive.write_text("ppt/slides/slide1.xml", xml.replace("old", "new"))
        archive.save(Path("output.pptx"))
    """

    def __init__(self, entries: Dict[str, Tuple[zipfile.ZipInfo, bytes]], source: str = "<memory>"):
        self._entries = entries
        self._modified: List[str] = []
        self.source = source

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "<memory>") -> "PackageArchive":
        """
        Read every entry of a zip container.

        Raises:
            TemplateLoadError: If the data is not a readable zip container
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as container:
                entries = {info.filename: (info, container.read(info)) for info in container.infolist()}
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise TemplateLoadError(f"Not a readable package: {source}", original_error=e)

        _log_debug(f"Opened {source} ({len(entries)} entries)")
        return cls(entries, source=source)

    @classmethod
    def from_path(cls, path: Union[Path, str]) -> "PackageArchive":
        """
        Open a package file.

        Raises:
            TemplateLoadError: If the file is missing or not a zip container
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise TemplateLoadError(f"Cannot read template: {path}", original_error=e)
        return cls.from_bytes(data, source=str(path))

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def names(self) -> List[str]:
        """Part names in container order."""
        return list(self._entries)

    def has(self, name: str) -> bool:
        return name in self._entries

    @property
    def modified_parts(self) -> List[str]:
        """Parts replaced or added since loading, in write order."""
        return list(self._modified)

    def read_bytes(self, name: str) -> bytes:
        if name not in self._entries:
            raise TemplateLoadError(f"Missing part in {self.source}", part_name=name)
        return self._entries[name][1]

    def read_text(self, name: str) -> str:
        """
        Read a part as text.

        Raises:
            TemplateLoadError: If the part is missing or not valid UTF-8
        """
        data = self.read_bytes(name)
        try:
            return data.decode(PART_ENCODING)
        except UnicodeDecodeError as e:
            raise TemplateLoadError("Part is not UTF-8 text", part_name=name, original_error=e)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def write_bytes(self, name: str, data: bytes) -> None:
        """Replace a part, or append a new one at the end of the container."""
        if name in self._entries:
            info = self._entries[name][0]
        else:
            info = zipfile.ZipInfo(name, date_time=self._reference_time())
            info.compress_type = zipfile.ZIP_DEFLATED

        self._entries[name] = (info, data)
        if name not in self._modified:
            self._modified.append(name)

    def write_text(self, name: str, text: str) -> None:
        self.write_bytes(name, text.encode(PART_ENCODING))

    def _reference_time(self) -> Tuple[int, int, int, int, int, int]:
        # New parts share the timestamp of the first entry so output stays deterministic
        for info, _ in self._entries.values():
            return info.date_time
        return (1980, 1, 1, 0, 0, 0)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """
        Serialize every entry in order.

        Raises:
            SerializationError: If the container cannot be written
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as container:
                for info, data in self._entries.values():
                    container.writestr(_clone_info(info), data)
        except (zipfile.LargeZipFile, ValueError, OSError) as e:
            raise SerializationError(f"Cannot serialize {self.source}", original_error=e)
        return buffer.getvalue()

    def save(self, path: Union[Path, str], data: Optional[bytes] = None) -> int:
        """
        Write the package to a file.

        Args:
            path: Destination file (parent directories are created)
            data: Already serialized bytes (serialized here when omitted)

        Returns:
            Number of bytes written

        Raises:
            SerializationError: If the file cannot be written
        """
        path = Path(path)
        if data is None:
            data = self.to_bytes()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise SerializationError(f"Cannot write output: {path}", original_error=e)

        log_archive_written(str(path), len(data), len(self._modified))
        return len(data)
