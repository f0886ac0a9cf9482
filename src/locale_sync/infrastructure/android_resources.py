"""Android ``strings.xml`` adapter — implements the ResourceFile port with lxml."""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

logger = logging.getLogger(__name__)

_MODIFIED_ATTR = "modified"
_TRACKED_TAGS = ("string", "plurals", "string-array")


def _secure_parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_blank_text=False,
        resolve_entities=False,
        no_network=True,
    )


class AndroidStringsFile:
    """A parsed ``<resources>`` document bound to a path on disk.

    Local edits are recorded in the document itself: every element changed
    through :meth:`set_string` carries ``modified="true"``, so whether a file
    was modified is derived from its content and survives restarts.
    """

    def __init__(self, path: Path, root: etree._Element) -> None:
        self.path = path
        self._root = root

    @classmethod
    def empty(cls, path: Path) -> AndroidStringsFile:
        return cls(path, etree.Element("resources"))

    @classmethod
    def parse(cls, path: Path) -> AndroidStringsFile:
        """Parse *path*; raises ``etree.XMLSyntaxError`` / ``OSError``."""
        tree = etree.parse(str(path), _secure_parser())
        return cls(path, tree.getroot())

    # ── Content ─────────────────────────────────────────────────────────

    @property
    def strings(self) -> dict[str, str]:
        """``name → text`` of every ``<string>`` element."""
        return {
            elem.get("name"): elem.text or ""
            for elem in self._root.iter("string")
            if elem.get("name")
        }

    def get_string(self, name: str) -> str | None:
        return self.strings.get(name)

    def set_string(self, name: str, value: str) -> None:
        """Set a ``<string>`` value and flag it as locally modified."""
        for elem in self._root.iter("string"):
            if elem.get("name") == name:
                break
        else:
            elem = etree.SubElement(self._root, "string", name=name)
        elem.text = value
        elem.set(_MODIFIED_ATTR, "true")

    def was_modified(self) -> bool:
        return any(
            elem.get(_MODIFIED_ATTR) == "true"
            for tag in _TRACKED_TAGS
            for elem in self._root.iter(tag)
        )

    # ── Persistence ─────────────────────────────────────────────────────

    def save(self) -> bool:
        """Write the document; directories created for a failed write are removed."""
        data = etree.tostring(
            self._root,
            xml_declaration=True,
            encoding="utf-8",
            pretty_print=True,
        )
        parent = self.path.parent
        created = [d for d in (parent, *parent.parents) if not d.exists()]
        try:
            parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(data)
        except OSError:
            logger.warning("Could not save %s", self.path, exc_info=True)
            for directory in created:
                if directory.is_dir() and not any(directory.iterdir()):
                    directory.rmdir()
            return False
        return True

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


class AndroidResourceFiles:
    """Concrete ``ResourceFileFactory`` for Android string resources."""

    def open(self, path: Path) -> AndroidStringsFile | None:
        if not path.exists():
            return AndroidStringsFile.empty(path)
        try:
            return AndroidStringsFile.parse(path)
        except (etree.XMLSyntaxError, OSError) as exc:
            logger.debug("Cannot read resources from %s: %s", path, exc)
            return None
