import pytest

from tcpmcast.header_buffer import Header, HeaderBuffer

MAC_A = b"\x02\x00\x00\x00\x00\x01"
MAC_B = b"\x02\x00\x00\x00\x00\x02"
MAC_C = b"\x02\x00\x00\x00\x00\x03"


def _filled():
    buf = HeaderBuffer(4)
    buf.append(0x0A000001, 1000, MAC_A)
    buf.append(0x0A000002, 2000, MAC_B)
    buf.append(0x0A000003, 3000, MAC_C)
    return buf


def test_append_and_iterate():
    buf = HeaderBuffer(2)
    buf.append(0x0A000001, 1000, MAC_A)
    assert list(buf) == [Header(MAC_A, 0x0A000001, 1000)]
    assert len(buf) == 1


def test_find_index_points_at_matching_header():
    buf = _filled()
    index = buf.find_index(0x0A000002, 2000)
    assert list(buf)[index] == Header(MAC_B, 0x0A000002, 2000)


def test_find_index_missing_returns_none():
    buf = _filled()
    assert buf.find_index(0x0A000002, 9999) is None


def test_append_when_full_raises():
    buf = HeaderBuffer(1)
    buf.append(0x0A000001, 1000, MAC_A)
    with pytest.raises(OverflowError):
        buf.append(0x0A000002, 2000, MAC_B)
    assert len(buf) == 1


def test_modify_replaces_in_place():
    buf = _filled()
    buf.modify(1, 0x0A000009, 9000, MAC_C)
    headers = list(buf)
    assert headers[1] == Header(MAC_C, 0x0A000009, 9000)
    assert headers[0] == Header(MAC_A, 0x0A000001, 1000)


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_modify_out_of_range(index):
    buf = _filled()
    with pytest.raises(IndexError):
        buf.modify(index, 1, 1, MAC_A)


def test_delete_moves_last_into_hole():
    buf = _filled()
    buf.delete(0)
    assert list(buf) == [
        Header(MAC_C, 0x0A000003, 3000),
        Header(MAC_B, 0x0A000002, 2000),
    ]


def test_delete_last_element():
    buf = _filled()
    buf.delete(2)
    assert buf.find_index(0x0A000003, 3000) is None
    assert len(buf) == 2


def test_delete_on_empty_raises():
    with pytest.raises(IndexError):
        HeaderBuffer(3).delete(0)


def test_delete_out_of_range_raises():
    buf = _filled()
    with pytest.raises(IndexError):
        buf.delete(5)


def test_header_rejects_bad_mac():
    with pytest.raises(ValueError):
        Header(b"\x02\x00", 1, 1)


def test_header_rejects_bad_port():
    with pytest.raises(ValueError):
        Header(MAC_A, 1, 70000)