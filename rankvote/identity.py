'''Voter and candidate identities.

Both voters and candidates are identified by account addresses - 20-byte
values, written in the customary way as ``0x``-prefixed hexadecimal strings.
Registries and ballot stores always hold the normalized lowercase form
returned by :func:`to_address`, so that two spellings of the same address
never count as two different candidates.

The elimination machinery in :mod:`rankvote.evaluate` does not need addresses;
any hashable objects will do there.
'''

import abc
import string
from typing import Any, Union

from rankvote.persist import simple_serialization

Address = str

ADDRESS_BYTES = 20

ZERO_ADDRESS: Address = '0x' + '00' * ADDRESS_BYTES

HEXDIGITS = frozenset(string.hexdigits)


class IdentityError(Exception):
    '''An identity is invalid in the given context.

    E.g. a malformed address in place of a candidate, or a voter that is not
    allowed to vote.

    :param identity: Identity that was found to be invalid.
    :param expected: Definition of an identity that was expected.
    '''
    def __init__(self, identity: Any, expected: Any = None):
        self.identity = identity
        self.expected = expected
        message = f'invalid identity: {identity!r}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


def to_address(value: Union[str, bytes]) -> Address:
    '''Normalize an address to its lowercase hexadecimal string form.

    :param value: Either a string of 40 hexadecimal digits prefixed with
        ``0x`` (in any letter case), or the raw 20 bytes.
    :raises IdentityError: If the value is not an address.
    '''
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_BYTES:
            raise IdentityError(value, f'{ADDRESS_BYTES} bytes')
        return '0x' + bytes(value).hex()
    elif isinstance(value, str):
        digits = value[2:]
        is_valid = (
            value[:2] in ('0x', '0X')
            and len(digits) == 2 * ADDRESS_BYTES
            and all(char in HEXDIGITS for char in digits)
        )
        if not is_valid:
            raise IdentityError(value, 'a 0x-prefixed hexadecimal address')
        return '0x' + digits.lower()
    else:
        raise IdentityError(value, 'an address string or bytes')


def address_bytes(address: Address) -> bytes:
    '''Return the raw 20 bytes of the address.'''
    return bytes.fromhex(to_address(address)[2:])


class Nominator(metaclass=abc.ABCMeta):
    '''An abstract class for nominators (candidacy validators).'''
    @abc.abstractmethod
    def validate(self, candidate: Any) -> None:
        '''Check if the candidate satisfies criteria given by the system.

        :raises NotImplementedError:
        '''
        raise NotImplementedError


@simple_serialization
class AddressNominator(Nominator):
    '''Validate that candidates are well-formed addresses.

    Does not do any logical checks: any address may stand, including the
    voter's own one or the zero address.
    '''
    def validate(self, candidate: Any) -> None:
        '''Check whether a candidate is a valid address.

        :param candidate: Candidate to be checked.
        :raises IdentityError: If the candidate is not an address.
        '''
        to_address(candidate)
