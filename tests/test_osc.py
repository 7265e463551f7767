import socket
import struct

import pytest

from gwugens.osc import (
    OscError,
    OscIn,
    OscOut,
    Proto,
    decode_message,
    encode_message,
    parse_url,
)


def _free_tcp_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_encode_int_message_bytes():
    assert encode_message("/a", [1]) == b"/a\x00\x00,i\x00\x00\x00\x00\x00\x01"


def test_encode_string_is_padded():
    data = encode_message("/s", ["abcd"])
    assert len(data) % 4 == 0
    assert data.endswith(b"abcd\x00\x00\x00\x00")


def test_round_trip_mixed_args():
    args = [42, -3.5, "hello", 0]
    assert decode_message(encode_message("/mixed/path", args)) == ("/mixed/path", "idsi", args)


def test_decode_float32():
    data = b"/f\x00\x00,f\x00\x00" + struct.pack(">f", 0.5)
    assert decode_message(data) == ("/f", "f", [0.5])


def test_decode_unknown_tag_raises():
    data = b"/x\x00\x00,b\x00\x00\x00\x00\x00\x00"
    with pytest.raises(OscError):
        decode_message(data)


def test_decode_truncated_raises():
    data = encode_message("/t", [5])[:-2]
    with pytest.raises(OscError):
        decode_message(data)


def test_encode_invalid_type_raises():
    with pytest.raises(OscError):
        encode_message("/x", [[1, 2]])


def test_encode_int_out_of_range_raises():
    with pytest.raises(OscError):
        encode_message("/x", [2**31])


def test_parse_udp_url():
    assert parse_url("osc.udp://localhost:9999/") == (Proto.UDP, "localhost", 9999)


def test_parse_tcp_and_default_urls():
    assert parse_url("osc.tcp://127.0.0.1:5000") == (Proto.TCP, "127.0.0.1", 5000)
    assert parse_url("osc://example.com:7000/x") == (Proto.UDP, "example.com", 7000)
    assert parse_url("osc.udp://[::1]:8000/") == (Proto.UDP, "::1", 8000)


def test_parse_unix_url():
    assert parse_url("osc.unix:///tmp/osc.sock") == (Proto.UNIX, "/tmp/osc.sock", None)


@pytest.mark.parametrize("url", ["http://localhost:80/", "osc.udp://localhost/", "osc.udp://:12/"])
def test_parse_bad_urls(url):
    with pytest.raises(OscError):
        parse_url(url)


def test_from_url_sets_address():
    out = OscOut.from_url("osc.udp://127.0.0.1:6000/")
    try:
        assert (out.proto, out.host, out.port) == (Proto.UDP, "127.0.0.1", 6000)
    finally:
        out.close()


def test_out_port_out_of_range():
    with pytest.raises(OscError):
        OscOut("localhost", 70000)


def test_send_and_receive_int():
    with OscIn(0) as receiver, OscOut("127.0.0.1", 0 or 1) as _:
        receiver.add("/num", "i")
        with OscOut("127.0.0.1", receiver.port) as out:
            assert out.add_int(7).send("/num") is True
        assert receiver.wait(2.0)
        assert receiver.recv()
        assert receiver.get_int() == 7


def test_receive_mixed_arguments_in_order():
    with OscIn(0) as receiver:
        receiver.add("/mix", "ids")
        with OscOut("127.0.0.1", receiver.port) as out:
            out.add_int(3).add_float(1.25).add_string("word").send("/mix")
        assert receiver.wait(2.0)
        assert receiver.recv()
        assert receiver.get_int() == 3
        assert receiver.get_float() == 1.25
        assert receiver.get_string() == "word"
        with pytest.raises(OscError):
            receiver.get_int()


def test_unmatched_types_are_dropped():
    with OscIn(0) as receiver:
        receiver.add("/only", "i")
        with OscOut("127.0.0.1", receiver.port) as out:
            out.add_float(2.0).send("/only")
            out.add_int(9).send("/only")
        assert receiver.wait(2.0)
        assert receiver.recv()
        assert receiver.get_int() == 9
        assert receiver.recv() is False


def test_wrong_getter_keeps_argument():
    with OscIn(0) as receiver:
        receiver.add("/s", "s")
        with OscOut("127.0.0.1", receiver.port) as out:
            out.add_string("text").send("/s")
        assert receiver.wait(2.0)
        assert receiver.recv()
        with pytest.raises(OscError):
            receiver.get_int()
        assert receiver.get_string() == "text"


def test_recv_without_message_is_false():
    with OscIn(0) as receiver:
        assert receiver.recv() is False
        assert receiver.wait(0.01) is False


def test_receivers_share_a_port():
    first = OscIn(0)
    second = OscIn(first.port)
    try:
        assert second.port == first.port
        first.add("/both", "s")
        second.add("/both", "s")
        with OscOut("127.0.0.1", first.port) as out:
            out.add_string("hi").send("/both")
        assert first.wait(2.0) and second.wait(2.0)
        assert first.recv() and second.recv()
        assert first.get_string() == "hi"
        assert second.get_string() == "hi"
    finally:
        second.close()
        first.close()


def test_port_in_use_raises():
    blocker = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    blocker.bind(("", 0))
    try:
        with pytest.raises(OscError):
            OscIn(blocker.getsockname()[1])
    finally:
        blocker.close()


def test_args_cleared_after_send():
    sink = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sink.bind(("127.0.0.1", 0))
    sink.settimeout(2.0)
    try:
        with OscOut("127.0.0.1", sink.getsockname()[1]) as out:
            out.add_int(1).send("/a")
            out.send("/b")
        first = decode_message(sink.recv(1024))
        second = decode_message(sink.recv(1024))
        assert first == ("/a", "i", [1])
        assert second == ("/b", "", [])
    finally:
        sink.close()


def test_tcp_send_is_length_prefixed():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(2.0)
    try:
        with OscOut("127.0.0.1", listener.getsockname()[1], Proto.TCP) as out:
            assert out.add_int(5).send("/t") is True
            conn, _ = listener.accept()
            with conn:
                conn.settimeout(2.0)
                (length,) = struct.unpack(">I", conn.recv(4))
                payload = b""
                while len(payload) < length:
                    payload += conn.recv(length - len(payload))
        assert decode_message(payload) == ("/t", "i", [5])
    finally:
        listener.close()


def test_tcp_send_failure_returns_false():
    with OscOut("127.0.0.1", _free_tcp_port(), Proto.TCP) as out:
        assert out.add_int(1).send("/x") is False


def test_send_after_close_raises():
    out = OscOut("127.0.0.1", 9000)
    out.close()
    with pytest.raises(OscError):
        out.send("/x")


def test_add_after_close_raises():
    receiver = OscIn(0)
    receiver.close()
    with pytest.raises(OscError):
        receiver.add("/x", "i")