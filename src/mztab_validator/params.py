"""Read-only access to a workflow ``params.xml`` document.

The document is a flat list of ``<parameter name="...">value</parameter>``
elements; a name may repeat, in which case every value is kept in document
order.
"""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from mztab_validator.errors import ParameterError
from mztab_validator.logging import get_logger


logger = get_logger(__file__)


class ParameterDocument:
    def __init__(self, values: dict[str, list[str]], source: Path | None = None):
        self._values = values
        self.source = source

    @classmethod
    def from_file(cls, path: str | Path) -> "ParameterDocument":
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Parameters file [{path}] could not be found.")
        try:
            tree = etree.parse(str(path))
        except etree.XMLSyntaxError as exc:
            raise ParameterError(f"Parameters file [{path}] is not valid XML: {exc}") from exc
        document = cls._from_root(tree.getroot(), source=path)
        logger.debug("Loaded %d parameter names from %s", len(document._values), path)
        return document

    @classmethod
    def from_string(cls, text: str | bytes) -> "ParameterDocument":
        if isinstance(text, str):
            text = text.encode("utf-8")
        return cls._from_root(etree.fromstring(text))

    @classmethod
    def _from_root(cls, root, source: Path | None = None) -> "ParameterDocument":
        values: dict[str, list[str]] = {}
        for element in root.iter("parameter"):
            name = element.get("name")
            if not name:
                continue
            values.setdefault(name, []).append((element.text or "").strip())
        return cls(values, source=source)

    def get_parameter(self, name: str) -> list[str]:
        return list(self._values.get(name, ()))

    def get_single(self, name: str) -> str | None:
        """First non-empty value of ``name``, or ``None``."""

        for value in self._values.get(name, ()):
            if value:
                return value
        return None

    def names(self) -> list[str]:
        return list(self._values)
