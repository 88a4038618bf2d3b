"""Wire codec: message encode and decode.

    from protowire.codec import decode_message, encode_message
"""

from protowire.codec.decoder import decode_message, merge_from_bytes
from protowire.codec.encoder import encode_message

__all__ = [
    "decode_message",
    "encode_message",
    "merge_from_bytes",
]
