"""
Per-channel data formats.
"""

from enum import Enum

from ..errors import ConfigError


class DataFormat(Enum):
    """How the raw bytes of a channel are decoded"""
    TEXT = "text"              # Newline-delimited UTF-8
    BINARY_LE = "binary_le"    # Little-endian f32 samples, grouped in triples
    STRUCTURED = "structured"  # Frames decoded by an external structured-log decoder

    @classmethod
    def parse(cls, value: "str | DataFormat") -> "DataFormat":
        """
        Parse a config value.

        >>> DataFormat.parse("String")
        <DataFormat.TEXT: 'text'>
        >>> DataFormat.parse("defmt")
        <DataFormat.STRUCTURED: 'structured'>
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        try:
            return cls(_ALIASES.get(key, key))
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ConfigError(f"Unknown data format '{value}' (expected one of: {choices})") from None


_ALIASES = {
    "string": "text",
    "binary": "binary_le",
    "binaryle": "binary_le",
    "defmt": "structured",
}
