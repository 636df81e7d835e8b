import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import rankvote.identity


@pytest.mark.parametrize(('value', 'expected'), [
    ('0x' + 'ab' * 20, '0x' + 'ab' * 20),
    ('0X' + 'AB' * 20, '0x' + 'ab' * 20),
    ('0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf',
        '0x7e5f4552091a69125d5dfcb7b8c2659029395bdf'),
    (bytes(range(20)), '0x' + bytes(range(20)).hex()),
    (bytearray(20), rankvote.identity.ZERO_ADDRESS),
])
def test_to_address(value, expected):
    assert rankvote.identity.to_address(value) == expected


@pytest.mark.parametrize('value', [
    'ab' * 20,
    '0x' + 'ab' * 19,
    '0x' + 'ab' * 21,
    '0x' + 'zz' * 20,
    bytes(19),
    42,
    None,
    ('0x' + 'ab' * 20,),
])
def test_to_address_invalid(value):
    with pytest.raises(rankvote.identity.IdentityError):
        rankvote.identity.to_address(value)


def test_address_bytes():
    assert rankvote.identity.address_bytes('0x' + '01' * 20) == b'\x01' * 20


def test_nominator():
    nominator = rankvote.identity.AddressNominator()
    nominator.validate('0x' + '00' * 20)
    with pytest.raises(rankvote.identity.IdentityError):
        nominator.validate('Angela Merkel')


def test_abstract_nominator():
    with pytest.raises(TypeError):
        rankvote.identity.Nominator()
