import pytest

from tcpmcast.cmd_buffer import AddCommand, CommandBuffer
from tcpmcast.header_buffer import Header, HeaderBuffer
from tcpmcast.ring_buffer import RingBufferFull

MAC_A = b"\x02\x00\x00\x00\x00\x0a"
MAC_B = b"\x02\x00\x00\x00\x00\x0b"
MAC_C = b"\x02\x00\x00\x00\x00\x0c"


def test_apply_on_empty_returns_zero():
    assert CommandBuffer(8).apply(HeaderBuffer(4)) == 0


def test_add_commands_append_headers():
    cmds = CommandBuffer(8)
    headers = HeaderBuffer(4)
    cmds.add_client(1, 100, MAC_A)
    cmds.add_client(2, 200, MAC_B)
    assert cmds.apply(headers) == len([MAC_A, MAC_B])
    assert list(headers) == [Header(MAC_A, 1, 100), Header(MAC_B, 2, 200)]


def test_commands_are_consumed():
    cmds = CommandBuffer(8)
    headers = HeaderBuffer(4)
    cmds.add_client(1, 100, MAC_A)
    cmds.apply(headers)
    assert cmds.apply(headers) == 0
    assert list(headers) == [Header(MAC_A, 1, 100)]


def test_del_removes_header():
    headers = HeaderBuffer(4)
    headers.append(1, 100, MAC_A)
    headers.append(2, 200, MAC_B)
    cmds = CommandBuffer(8)
    cmds.del_client(1, 100)
    cmds.apply(headers)
    assert list(headers) == [Header(MAC_B, 2, 200)]


def test_paired_add_overwrites_deleted_slot():
    headers = HeaderBuffer(4)
    headers.append(1, 100, MAC_A)
    headers.append(2, 200, MAC_B)
    cmds = CommandBuffer(8)
    cmds.add_client(3, 300, MAC_C)
    cmds.del_client(1, 100)
    cmds.apply(headers)
    assert list(headers) == [Header(MAC_C, 3, 300), Header(MAC_B, 2, 200)]


def test_paired_add_with_missing_target_appends():
    headers = HeaderBuffer(4)
    headers.append(1, 100, MAC_A)
    cmds = CommandBuffer(8)
    cmds.add_client(3, 300, MAC_C)
    cmds.del_client(9, 900)
    cmds.apply(headers)
    assert list(headers) == [Header(MAC_A, 1, 100), Header(MAC_C, 3, 300)]


def test_del_of_unknown_client_changes_nothing():
    headers = HeaderBuffer(4)
    headers.append(1, 100, MAC_A)
    cmds = CommandBuffer(8)
    cmds.del_client(9, 900)
    cmds.apply(headers)
    assert list(headers) == [Header(MAC_A, 1, 100)]


def test_append_overflow_is_not_fatal():
    headers = HeaderBuffer(1)
    cmds = CommandBuffer(8)
    cmds.add_client(1, 100, MAC_A)
    cmds.add_client(2, 200, MAC_B)
    cmds.apply(headers)
    assert list(headers) == [Header(MAC_A, 1, 100)]


def test_add_queue_full_raises():
    cmds = CommandBuffer(2)
    cmds.add_client(1, 100, MAC_A)
    with pytest.raises(RingBufferFull):
        cmds.add_client(2, 200, MAC_B)


def test_del_queue_full_raises():
    cmds = CommandBuffer(2)
    cmds.del_client(1, 100)
    with pytest.raises(RingBufferFull):
        cmds.del_client(2, 200)


def test_add_command_normalises_mac():
    cmd = AddCommand(1, 2, bytearray(MAC_A))
    assert cmd.mac == MAC_A