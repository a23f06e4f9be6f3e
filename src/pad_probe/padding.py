def strip_padding(data: bytes, block_size: int = 8) -> bytes:
    """ Strip PKCS#7 padding from a decrypted message.

    The last byte is read as the padding length. Values outside 1..block_size, or
    longer than the message itself, mean the tail is not padding and the input is
    returned unchanged.
    """
    if not data:
        return data

    pad_length = data[-1]
    if 1 <= pad_length <= block_size and pad_length <= len(data):
        return data[:-pad_length]

    return data
