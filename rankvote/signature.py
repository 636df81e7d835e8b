'''Ballots authorized by a detached signature.

A voter does not have to submit their ballot personally: anyone can submit
it on their behalf along with the voter's signature over the ballot. The
authorizing voter is then recovered from the signature rather than taken from
the submitter.

The signed message is a typed structured-data hash in the EIP-712 layout,
computed with Keccak-256 over a domain separator (:class:`BallotDomain`) and
the ballot struct. Signatures are secp256k1 ECDSA signatures in the 65-byte
``r || s || v`` form; the voter address is derived from the recovered public
key.

The struct type string historically bound into the hash,
``Ballot(uint256[] candidates)``, describes a list of plain numbers even
though the ballot ranks addresses. Since an address padded to 32 bytes
encodes the same as the equal number, only the type hash differs; the
corrected ``Ballot(address[] candidates)`` type can be chosen by passing
:data:`CORRECTED_BALLOT_TYPE` to the authorizer, at the cost of compatibility
with signatures made for the historical type.

There is no nonce in the signed message, so a signature can be replayed
within an epoch to restore the ballot it was made for.
'''

import hashlib
from typing import Optional, Sequence, Tuple, Union

import ecdsa
import ecdsa.errors
import ecdsa.numbertheory
import ecdsa.util
from Crypto.Hash import keccak

from rankvote.identity import Address, ZERO_ADDRESS, address_bytes, to_address
from rankvote.persist import simple_serialization

EIP712_DOMAIN_TYPE = (
    'EIP712Domain(string name,string version,uint256 chainId,'
    'address verifyingContract)'
)
BALLOT_TYPE = 'Ballot(uint256[] candidates)'
CORRECTED_BALLOT_TYPE = 'Ballot(address[] candidates)'

CURVE = ecdsa.SECP256k1
SIGNATURE_BYTES = 65
RECOVERY_ID_OFFSET = 27

SignatureType = Union[bytes, str]
PrivateKeyType = Union[int, bytes]

RECOVERY_ERRORS = (
    ecdsa.numbertheory.Error,
    ecdsa.errors.MalformedPointError,
    ArithmeticError,
    RuntimeError,
    TypeError,
    ValueError,
)


class InvalidSignature(Exception):
    '''A signature is malformed or no signer can be recovered from it.

    :param signature: The signature found to be invalid.
    :param reason: What is wrong with the signature.
    '''
    def __init__(self, signature: SignatureType, reason: str):
        self.signature = signature
        self.reason = reason
        super().__init__(f'invalid signature {signature!r}: {reason}')


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def encode_uint(value: int) -> bytes:
    return value.to_bytes(32, 'big')


def encode_address(address: Address) -> bytes:
    return address_bytes(address).rjust(32, b'\x00')


def address_from_public_key(key: ecdsa.VerifyingKey) -> Address:
    '''Derive the address belonging to a public key.'''
    return to_address(keccak256(key.to_string())[-20:])


def address_from_private_key(private_key: PrivateKeyType) -> Address:
    '''Derive the address belonging to a private key.'''
    return address_from_public_key(
        _signing_key(private_key).get_verifying_key()
    )


@simple_serialization
class BallotDomain:
    '''The signing domain that binds ballot signatures to a single election.

    :param name: Name of the signing domain.
    :param version: Version of the signing domain.
    :param chain_id: Identifier of the network hosting the election.
    :param verifying_contract: Address of the election.
    '''
    def __init__(self,
                 name: str = 'RankedChoice',
                 version: str = '1',
                 chain_id: int = 1,
                 verifying_contract: Address = ZERO_ADDRESS,
                 ):
        self.name = name
        self.version = version
        self.chain_id = chain_id
        self.verifying_contract = to_address(verifying_contract)

    def separator(self) -> bytes:
        '''Return the domain separator hash.'''
        return keccak256(
            keccak256(EIP712_DOMAIN_TYPE.encode('utf8'))
            + keccak256(self.name.encode('utf8'))
            + keccak256(self.version.encode('utf8'))
            + encode_uint(self.chain_id)
            + encode_address(self.verifying_contract)
        )

    def __repr__(self) -> str:
        return f'<BallotDomain({self.name},{self.version},{self.chain_id})>'


@simple_serialization
class SignatureAuthorizer:
    '''Recover the voter that authorized a ballot from their signature.

    :param domain: Signing domain of the election. The default domain is used
        if not given.
    :param ballot_type: The struct type string bound into the ballot hash.
    '''
    def __init__(self,
                 domain: Optional[BallotDomain] = None,
                 ballot_type: str = BALLOT_TYPE,
                 ):
        if domain is None:
            domain = BallotDomain()
        self.domain = domain
        self.ballot_type = ballot_type

    def struct_hash(self, ordered_candidates: Sequence[Address]) -> bytes:
        packed = b''.join(encode_address(cand) for cand in ordered_candidates)
        return keccak256(
            keccak256(self.ballot_type.encode('utf8')) + keccak256(packed)
        )

    def digest(self, ordered_candidates: Sequence[Address]) -> bytes:
        '''Return the hash that voters sign to authorize the ballot.

        :raises IdentityError: If any of the candidates is malformed.
        '''
        return keccak256(
            b'\x19\x01'
            + self.domain.separator()
            + self.struct_hash(ordered_candidates)
        )

    def recover(self,
                ordered_candidates: Sequence[Address],
                signature: SignatureType,
                ) -> Address:
        '''Return the address of the voter that signed the ballot.

        A valid signature over a different ballot recovers some unrelated
        address rather than failing; such an address is refused later as it
        is not a registered voter.

        :param ordered_candidates: The ballot that was signed.
        :param signature: A 65-byte ``r || s || v`` signature, as bytes or
            a hexadecimal string.
        :raises InvalidSignature: If the signature is malformed or no public
            key can be recovered from it.
        '''
        rs_bytes, recovery_id = split_signature(signature)
        digest = self.digest(ordered_candidates)
        try:
            keys = ecdsa.VerifyingKey.from_public_key_recovery_with_digest(
                rs_bytes, digest, CURVE,
                hashfunc=hashlib.sha256,
                sigdecode=ecdsa.util.sigdecode_string,
            )
        except RECOVERY_ERRORS as e:
            raise InvalidSignature(signature, 'signer not recoverable') from e
        if recovery_id >= len(keys):
            raise InvalidSignature(signature, 'signer not recoverable')
        return address_from_public_key(keys[recovery_id])

    def sign(self,
             ordered_candidates: Sequence[Address],
             private_key: PrivateKeyType,
             ) -> bytes:
        '''Sign the ballot on behalf of the voter owning the private key.

        :param ordered_candidates: The ballot to sign.
        :param private_key: The voter's secp256k1 private key, as an integer
            or 32 bytes.
        :returns: A 65-byte signature accepted by :meth:`recover`.
        '''
        key = _signing_key(private_key)
        digest = self.digest(ordered_candidates)
        rs_bytes = key.sign_digest_deterministic(
            digest,
            hashfunc=hashlib.sha256,
            sigencode=ecdsa.util.sigencode_string_canonize,
        )
        candidates = ecdsa.VerifyingKey.from_public_key_recovery_with_digest(
            rs_bytes, digest, CURVE,
            hashfunc=hashlib.sha256,
            sigdecode=ecdsa.util.sigdecode_string,
        )
        own_key = key.get_verifying_key().to_string()
        recovery_id = next(
            i for i, cand in enumerate(candidates)
            if cand.to_string() == own_key
        )
        return rs_bytes + bytes([RECOVERY_ID_OFFSET + recovery_id])


def split_signature(signature: SignatureType) -> Tuple[bytes, int]:
    '''Split a 65-byte signature into its ``r || s`` part and recovery ID.

    :raises InvalidSignature: If the signature is malformed, uses an unknown
        recovery ID, or its ``s`` value lies in the upper half of the curve
        order (which would make it malleable).
    '''
    if isinstance(signature, str):
        hex_digits = signature[2:] if signature[:2] in ('0x', '0X') else signature
        try:
            raw = bytes.fromhex(hex_digits)
        except ValueError as e:
            raise InvalidSignature(signature, 'not hexadecimal') from e
    elif isinstance(signature, (bytes, bytearray)):
        raw = bytes(signature)
    else:
        raise InvalidSignature(signature, 'must be bytes or a hex string')
    if len(raw) != SIGNATURE_BYTES:
        raise InvalidSignature(
            signature, f'{len(raw)} bytes, must be {SIGNATURE_BYTES}'
        )
    recovery_id = raw[64]
    if recovery_id >= RECOVERY_ID_OFFSET:
        recovery_id -= RECOVERY_ID_OFFSET
    if recovery_id not in (0, 1):
        raise InvalidSignature(signature, f'invalid v value {raw[64]}')
    r = int.from_bytes(raw[:32], 'big')
    s = int.from_bytes(raw[32:64], 'big')
    order = CURVE.order
    if not 0 < r < order:
        raise InvalidSignature(signature, 'r out of range')
    if not 0 < s <= order // 2:
        raise InvalidSignature(signature, 's out of range')
    return raw[:64], recovery_id


def _signing_key(private_key: PrivateKeyType) -> ecdsa.SigningKey:
    if isinstance(private_key, int):
        return ecdsa.SigningKey.from_secret_exponent(private_key, curve=CURVE)
    else:
        return ecdsa.SigningKey.from_string(bytes(private_key), curve=CURVE)
