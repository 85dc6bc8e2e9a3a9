"""Character layer: encoding detection, decoding and system id resolution.

The transform engine only ever sees decoded characters; everything that
turns bytes or locators into characters lives here.
"""

from .encoding import (
    BOMDetector,
    DecodedCharacterStream,
    DetectionMethod,
    EncodingResult,
    RawByteGuesser,
    XMLDeclarationParser,
    XMLEncodingSniffer,
    open_decoded_stream,
)
from .resolution import is_absolute_uri, open_system_id

__all__ = [
    # Modules
    "encoding",
    "resolution",
    # Encoding detection
    "BOMDetector",
    "DetectionMethod",
    "EncodingResult",
    "RawByteGuesser",
    "XMLDeclarationParser",
    "XMLEncodingSniffer",
    # Decoding and resolution
    "DecodedCharacterStream",
    "open_decoded_stream",
    "is_absolute_uri",
    "open_system_id",
]
