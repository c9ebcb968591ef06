import pytest

from tyrant.protocol import encode, fields


def wire(buffers):
    assert isinstance(buffers, list)
    for buffer in buffers:
        assert isinstance(buffer, bytes)
    return b''.join(buffers)


def test_put():

    request = wire(encode.put('a', 'b'))
    assert request == bytes.fromhex('C810 00000001 00000001 6162')

    request = wire(encode.put(b'key', b'value'))
    assert request[:2] == b'\xc8\x10'
    assert request[2:10] == bytes.fromhex('00000003 00000005')
    assert request[10:] == b'keyvalue'


def test_put_integer():

    request = wire(encode.put('k', 7))
    assert request == bytes.fromhex('C810 00000001 00000004 6B 00000007')

    request = wire(encode.put('k', 0))
    assert request == bytes.fromhex('C810 00000001 00000004 6B 00000000')

    request = wire(encode.put('k', 2**32 - 1))
    assert request == bytes.fromhex('C810 00000001 00000004 6B FFFFFFFF')

    with pytest.raises(ValueError):
        encode.put('k', 2**32)

    with pytest.raises(ValueError):
        encode.put('k', -1)


def test_integer_form_is_put_only():

    # The other put variants only accept blobs.

    with pytest.raises(TypeError):
        encode.putkeep('k', 7)

    with pytest.raises(TypeError):
        encode.putcat('k', 7)

    # A boolean is not an integer for this purpose.

    with pytest.raises(TypeError):
        encode.put('k', True)


def test_content_agnostic():

    for key, value in ((b'', b''), (b'\x00', b'\x00\x00'), (bytes(range(256)), b'\n\t\r\n')):
        request = wire(encode.put(key, value))
        header = bytes.fromhex('C810') + len(key).to_bytes(4, 'big') + len(value).to_bytes(4, 'big')
        assert request == header + key + value


def test_fragments():

    request = wire(encode.put(['a', b'b'], [b'c', ['d', bytearray(b'e')]]))
    assert request == bytes.fromhex('C810 00000002 00000003') + b'abcde'

    request = wire(encode.get(memoryview(b'xyz')))
    assert request == bytes.fromhex('C830 00000003') + b'xyz'

    request = wire(encode.get('é'))
    assert request == bytes.fromhex('C830 00000002 C3A9')

    with pytest.raises(TypeError):
        encode.get(None)

    with pytest.raises(TypeError):
        encode.get(['a', 5])


def test_zero_argument():

    expected = {
        encode.sync: fields.SYNC,
        encode.vanish: fields.VANISH,
        encode.iterinit: fields.ITERINIT,
        encode.iternext: fields.ITERNEXT,
        encode.rnum: fields.RNUM,
        encode.size: fields.SIZE,
        encode.stat: fields.STAT,
    }

    for function, code in expected.items():
        assert wire(function()) == code.to_bytes(2, 'big')

    assert wire(encode.sync()) == b'\xc8\x70'


def test_single_key():

    assert wire(encode.out('key')) == bytes.fromhex('C820 00000003') + b'key'
    assert wire(encode.get('key')) == bytes.fromhex('C830 00000003') + b'key'
    assert wire(encode.vsiz('key')) == bytes.fromhex('C838 00000003') + b'key'
    assert wire(encode.copy('/tmp/db')) == bytes.fromhex('C873 00000007') + b'/tmp/db'
    assert wire(encode.optimize()) == bytes.fromhex('C871 00000000')


def test_key_value_family():

    assert wire(encode.putkeep('a', 'b')) == bytes.fromhex('C811 00000001 00000001 6162')
    assert wire(encode.putcat('a', 'b')) == bytes.fromhex('C812 00000001 00000001 6162')
    assert wire(encode.putnr('a', 'b')) == bytes.fromhex('C818 00000001 00000001 6162')

    request = wire(encode.putshl('k', 'v', 8))
    assert request == bytes.fromhex('C813 00000001 00000001 00000008 6B 76')


def test_mget():

    request = wire(encode.mget(['a', 'bc']))
    assert request == bytes.fromhex('C831 00000002 00000001 61 00000002 6263')

    request = wire(encode.mget(key for key in ('a',)))
    assert request == bytes.fromhex('C831 00000001 00000001 61')

    assert wire(encode.mget([])) == bytes.fromhex('C831 00000000')

    with pytest.raises(TypeError):
        encode.mget('ab')


def test_fwmkeys():

    request = wire(encode.fwmkeys('pre', 10))
    assert request == bytes.fromhex('C858 00000003 0000000A') + b'pre'

    request = wire(encode.fwmkeys('pre', -1))
    assert request == bytes.fromhex('C858 00000003 FFFFFFFF') + b'pre'

    request = wire(encode.fwmkeys('pre', -20))
    assert request == bytes.fromhex('C858 00000003 FFFFFFFF') + b'pre'


def test_addint():

    request = wire(encode.addint('k', 5))
    assert request == bytes.fromhex('C860 00000001 00000005 6B')

    request = wire(encode.addint('k', -1))
    assert request == bytes.fromhex('C860 00000001 FFFFFFFF 6B')

    with pytest.raises(ValueError):
        encode.addint('k', 2**31)

    with pytest.raises(TypeError):
        encode.addint('k', 1.5)


def test_adddouble():

    request = wire(encode.adddouble('k', 1, 500))
    assert request == bytes.fromhex('C861 00000001 0000000000000001 00000000000001F4 6B')

    request = wire(encode.adddouble('k', -1, 0))
    assert request == bytes.fromhex('C861 00000001 FFFFFFFFFFFFFFFF 0000000000000000 6B')


def test_administrative():

    request = wire(encode.restore('/log', 123))
    assert request == bytes.fromhex('C874 00000004 000000000000007B') + b'/log'

    request = wire(encode.setmst('h', 1978))
    assert request == bytes.fromhex('C878 00000001 000007BA 68')

    with pytest.raises(ValueError):
        encode.setmst('h', -1)


def test_ext():

    request = wire(encode.ext('fn', fields.XOLCKREC, 'k', 'vv'))
    expected = bytes.fromhex('C868 00000002 00000001 00000001 00000002')
    assert request == expected + b'fnkvv'

    request = wire(encode.ext('fn', fields.XOLCKGLB, b'', b''))
    assert request == bytes.fromhex('C868 00000002 00000002 00000000 00000000') + b'fn'


def test_misc():

    request = wire(encode.misc('putlist', ['a', 'b', 'c', 5]))
    expected = bytes.fromhex('C890 00000007 00000000 00000004') + b'putlist'
    expected += bytes.fromhex('00000001 61 00000001 62 00000001 63 00000004 00000005')
    assert request == expected

    request = wire(encode.misc('getlist', ['a'], update=False))
    expected = bytes.fromhex('C890 00000007 00000001 00000001') + b'getlist'
    expected += bytes.fromhex('00000001 61')
    assert request == expected

    request = wire(encode.misc('genuid'))
    assert request == bytes.fromhex('C890 00000006 00000000 00000000') + b'genuid'

    # Only the value half of a pair gets the integer form.

    with pytest.raises(TypeError):
        encode.misc('putlist', [5, 'b'])

    with pytest.raises(TypeError):
        encode.misc('putlist', 'ab')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
