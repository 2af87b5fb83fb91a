# tests/overload_gen/conftest.py
import pytest

from overload_gen.config import EmitOptions, ImportConfig
from overload_gen.operators import Arity, OperatorDescriptor, ReturnKind, TypeDescriptor
from overload_gen.testgen import TestVector

ADD = OperatorDescriptor("add", supports_scalar=True, binary_symbol="+")
EQ = OperatorDescriptor("eq", supports_scalar=True, return_kind=ReturnKind.BOOLEAN)
DIV = OperatorDescriptor(
    "div", supports_encrypted=False, supports_scalar=True, disallow_scalar_on_left=True,
)
SHL = OperatorDescriptor("shl", is_shift=True)
ROTR = OperatorDescriptor("rotr", is_rotate=True)
NEG = OperatorDescriptor("neg", arity=Arity.UNARY, unary_symbol="-")


@pytest.fixture
def ops():
    """Small operator set covering every overload family."""
    return {"add": ADD, "eq": EQ, "div": DIV, "shl": SHL, "rotr": ROTR, "neg": NEG}


@pytest.fixture
def uint_type():
    """Factory fixture building unsigned type descriptors."""
    def _make(bits: int, *names: str) -> TypeDescriptor:
        return TypeDescriptor(f"Uint{bits}", bits, frozenset(names))
    return _make


@pytest.fixture
def import_config():
    return ImportConfig(
        signers="../signers",
        instance="../instance",
        typechain="../../types/contracts/tests",
    )


@pytest.fixture
def user_decrypt():
    return EmitOptions(public_decrypt=False)


@pytest.fixture
def public_decrypt():
    return EmitOptions(public_decrypt=True)


@pytest.fixture
def ones():
    """Factory fixture giving every signature ``count`` vectors of all ones."""
    def _make(signatures, count: int = 1) -> dict[str, list[TestVector]]:
        return {
            sig.method_name: [TestVector((1,) * len(sig.arguments), 1) for _ in range(count)]
            for sig in signatures
        }
    return _make
