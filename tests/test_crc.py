from maple2.crc import crc32


def test_standard_check_value():
    assert crc32(0, b"123456789") == 0xCBF43926


def test_empty_data_keeps_crc():
    assert crc32(0, b"") == 0
    assert crc32(0x1234, b"") == 0x1234


def test_chaining_matches_single_pass():
    first, second = b"WOZ2\xff\n\r\n", bytes(range(256))
    assert crc32(crc32(0, first), second) == crc32(0, first + second)


def test_accepts_list_of_ints():
    assert crc32(0, [0x31, 0x32, 0x33]) == crc32(0, b"123")


def test_result_fits_in_32_bits():
    value = crc32(0, bytes(1000))
    assert 0 <= value <= 0xFFFFFFFF