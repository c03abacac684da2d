"""
Scaffold Templates.

One renderer per language. A renderer receives the extracted symbols and
capability flags and returns the complete test-suite text. Fixed sections
are ``string.Template`` bodies (``$name`` placeholders, so the braces of the
target languages need no escaping); per-symbol and conditional blocks are
concatenated in between.

Every renderer emits setup/teardown boilerplate, a functionality block and
an access-control block per symbol, the conditional post-quantum /
reentrancy / async blocks, and placeholder assertions when no symbol was
found.
"""

import re
from string import Template
from typing import List

from testgen.models import CapabilityFlags, ScaffoldSymbols

DEFAULT_CONTRACT_NAME = "TestContract"


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


# ============================================================================
# Solidity (Foundry)
# ============================================================================

_SOL_HEADER = Template("""\
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

import "forge-std/Test.sol";
import "../src/$contract.sol";
$pq_imports
contract ${contract}Test is Test {
    $contract public testContract;
    address public owner;
    address public user1;
    address public user2;
    address public attacker;

    event TestPassed(string testName);
    event SecurityTestPassed(string vulnerability, bool mitigated);

    function setUp() public {
        owner = address(this);
        user1 = makeAddr("user1");
        user2 = makeAddr("user2");
        attacker = makeAddr("attacker");

        vm.startPrank(owner);
        testContract = new $contract();
        vm.stopPrank();

        vm.deal(user1, 10 ether);
        vm.deal(user2, 10 ether);
        vm.deal(attacker, 10 ether);
    }

    function tearDown() public {
        vm.clearMockedCalls();
    }

    function testContractDeployment() public {
        assertTrue(address(testContract) != address(0), "Contract should be deployed");
        emit TestPassed("Contract Deployment");
    }
""")

_SOL_FUNCTION_BLOCKS = Template("""
    function test${cap}Functionality() public {
        vm.startPrank(user1);
$body
        vm.stopPrank();
        emit TestPassed("$name Functionality");
    }

    function test${cap}AccessControl() public {
        vm.startPrank(attacker);
        vm.expectRevert();
        // Attempt to call $name without proper authorization
        testContract.$name();
        vm.stopPrank();
        emit SecurityTestPassed("Access Control", true);
    }
""")

_SOL_PAYABLE_BODY = Template("""\
        uint256 value = 1 ether;
        (bool success,) = address(testContract).call{value: value}(
            abi.encodeWithSignature("$name()")
        );
        assertTrue(success, "$name should accept payment");""")

_SOL_VIEW_BODY = Template("""\
        (bool success,) = address(testContract).staticcall(
            abi.encodeWithSignature("$name()")
        );
        assertTrue(success, "$name view function should succeed");""")

_SOL_PLAIN_BODY = Template("""\
        // Add specific test logic based on the $name signature
        assertTrue(true, "$name test placeholder");""")

_SOL_NO_SYMBOLS = """
    function testPlaceholder() public {
        // No functions were found in the source; extend this scaffold manually
        assertTrue(true, "Placeholder assertion");
        emit TestPassed("Placeholder");
    }
"""

_SOL_POST_QUANTUM = """
    function testPostQuantumSecurity() public {
        bytes memory testData = abi.encodePacked("test data");

        bytes32 pqHash = testContract.postQuantumHash(testData);
        assertTrue(pqHash != bytes32(0), "Post-quantum hash should not be zero");

        bytes32 pqHash2 = testContract.postQuantumHash(testData);
        assertEq(pqHash, pqHash2, "Post-quantum hash should be deterministic");

        emit SecurityTestPassed("Post-Quantum Hash", true);
    }

    function testDilithiumSignatureVerification() public {
        bytes32 message = testContract.postQuantumHash(abi.encodePacked("test message"));

        // Stub signature components; a real Dilithium signature replaces these
        uint8 v = 27;
        bytes32 r = bytes32(uint256(1));
        bytes32 s = bytes32(uint256(2));

        bool isValid = testContract.dilithiumVerify(message, v, r, s);
        assertTrue(isValid || !isValid, "Verification should return a boolean");

        emit SecurityTestPassed("Dilithium Signature", true);
    }
"""

_SOL_REENTRANCY = """
    function testReentrancyProtection() public {
        ReentrancyAttacker attackContract = new ReentrancyAttacker(address(testContract));

        vm.startPrank(attacker);
        vm.expectRevert("ReentrancyGuard: reentrant call");
        attackContract.attack();
        vm.stopPrank();

        emit SecurityTestPassed("Reentrancy Protection", true);
    }
"""

_SOL_FOOTER = Template("""
    function testGasOptimization() public {
        uint256 gasBefore = gasleft();
        $gas_call
        uint256 gasUsed = gasBefore - gasleft();
        assertTrue(gasUsed < 100000, "Gas usage should be optimized");
        emit TestPassed("Gas Optimization");
    }

    function testFuzzInputValidation(uint256 input) public {
        vm.assume(input > 0 && input < type(uint128).max);
        $fuzz_call
        emit TestPassed("Fuzz Test Input Validation");
    }

    function testEdgeCases() public {
        // Zero values, maximum values and invalid inputs
        emit TestPassed("Edge Cases");
    }
}
""")

_SOL_ATTACKER = """
// Mock reentrancy attacker contract for testing
contract ReentrancyAttacker {
    address target;

    constructor(address _target) {
        target = _target;
    }

    function attack() external {
        (bool success,) = target.call("");
        require(success, "Attack failed");
    }

    fallback() external payable {
        (bool success,) = target.call("");
        require(success, "Reentrancy failed");
    }
}
"""


def _solidity_function_body(name: str, modifiers: str) -> str:
    if "payable" in modifiers:
        return _SOL_PAYABLE_BODY.substitute(name=name)
    if "view" in modifiers or "pure" in modifiers:
        return _SOL_VIEW_BODY.substitute(name=name)
    return _SOL_PLAIN_BODY.substitute(name=name)


def render_solidity(symbols: ScaffoldSymbols, flags: CapabilityFlags, code: str) -> str:
    contract = symbols.types[0] if symbols.types else DEFAULT_CONTRACT_NAME
    pq_imports = ""
    if flags.post_quantum:
        pq_imports = (
            'import "../src/libraries/PostQuantumHash.sol";\n'
            'import "../src/libraries/DilithiumSignature.sol";\n'
        )

    parts: List[str] = [_SOL_HEADER.substitute(contract=contract, pq_imports=pq_imports)]

    for name in symbols.functions:
        declaration = re.search(rf"\bfunction\s+{re.escape(name)}\s*\([^)]*\)([^{{;]*)", code)
        modifiers = declaration.group(1) if declaration else ""
        parts.append(_SOL_FUNCTION_BLOCKS.substitute(
            name=name,
            cap=_capitalize(name),
            body=_solidity_function_body(name, modifiers),
        ))
    if symbols.is_empty:
        parts.append(_SOL_NO_SYMBOLS)

    if flags.post_quantum:
        parts.append(_SOL_POST_QUANTUM)
    if flags.reentrancy_guard:
        parts.append(_SOL_REENTRANCY)

    if symbols.functions:
        first = symbols.functions[0]
        gas_call = f"testContract.{first}();"
        fuzz_call = f"// testContract.{first}(input);"
    else:
        gas_call = "// No functions to test"
        fuzz_call = "// No functions to fuzz test"
    parts.append(_SOL_FOOTER.substitute(gas_call=gas_call, fuzz_call=fuzz_call))

    if flags.reentrancy_guard:
        parts.append(_SOL_ATTACKER)

    return "".join(parts)


# ============================================================================
# Python (pytest)
# ============================================================================

_PY_HEADER = Template('''\
"""Generated test suite for refactored Python code with post-quantum security."""

import inspect
import os
import sys
import threading
import tracemalloc
from unittest.mock import MagicMock
$async_imports
import pytest

# Add the source directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Module under test; override with QSHIELD_TARGET_MODULE
target = pytest.importorskip(os.environ.get("QSHIELD_TARGET_MODULE", "refactored_module"))

MALICIOUS_INPUTS = [
    "<script>alert('xss')</script>",
    "'; DROP TABLE users; --",
    "../../../etc/passwd",
    "\\\\x00\\\\x01\\\\x02",
]


def _require(name):
    member = getattr(target, name, None)
    if member is None:
        pytest.skip(f"{name} is not defined at module level")
    return member


class TestRefactoredCode:
    """Test suite for the refactored module."""

    def setup_method(self):
        """Set up test fixtures before each test method."""
        self.test_data = {
            "valid_input": "test_data",
            "invalid_input": None,
            "large_input": "x" * 10000,
            "empty_input": "",
            "numeric_input": 12345,
        }
        self.mock_external_service = MagicMock()

    def teardown_method(self):
        """Clean up after each test method."""
        self.mock_external_service.reset_mock()
''')

_PY_FUNCTION_BLOCKS = Template('''
    def test_${name}_functionality(self):
        """Test $name basic functionality."""
        func = _require("$name")
        try:
            result = func(self.test_data["valid_input"])
        except (ValueError, TypeError):
            pytest.skip("$name needs a different call signature")
        assert result is None or isinstance(result, (str, bytes, int, float, list, dict, bool))

    def test_${name}_access_control(self):
        """$name must reject malicious input without leaking internals."""
        func = _require("$name")
        for malicious_input in MALICIOUS_INPUTS:
            try:
                result = func(malicious_input)
            except (ValueError, TypeError, PermissionError):
                continue
            assert "Traceback" not in str(result)
''')

_PY_CLASS_BLOCKS = Template('''
    def test_${lower}_initialization(self):
        """Test $name class initialization."""
        cls = _require("$name")
        try:
            instance = cls()
        except TypeError:
            pytest.skip("$name requires constructor arguments")
        assert isinstance(instance, cls)

    def test_${lower}_encapsulation(self):
        """$name must not expose secret material as public attributes."""
        cls = _require("$name")
        public = [attr for attr in dir(cls) if not attr.startswith("_")]
        leaked = [attr for attr in public if attr.lower().endswith(("secret", "private_key", "password"))]
        assert leaked == [], f"Public secret attributes: {leaked}"
''')

_PY_NO_SYMBOLS = '''
    def test_placeholder(self):
        """No functions or classes were found; extend this scaffold manually."""
        assert target is not None
'''

_PY_POST_QUANTUM = '''
    def test_post_quantum_cryptography(self):
        """Test post-quantum cryptographic functions."""
        pq_hash = pytest.importorskip("pqcrypto.hash.sphincsplus")
        test_data = b"test data for hashing"
        assert pq_hash.hash(test_data) == pq_hash.hash(test_data)

    def test_dilithium_signatures(self):
        """Dilithium signatures must verify."""
        dilithium = pytest.importorskip("pqcrypto.sign.dilithium2")
        public_key, secret_key = dilithium.generate_keypair()
        message = b"test message for signing"
        signature = dilithium.sign(secret_key, message)
        assert dilithium.verify(public_key, message, signature)

    def test_quantum_resistance_properties(self):
        """Quantum-vulnerable primitives must not remain in the module."""
        source_code = inspect.getsource(target)
        for pattern in ("hashlib.md5", "hashlib.sha1", "rsa.", "ecdsa."):
            assert pattern not in source_code, f"Quantum-vulnerable pattern '{pattern}' found"
'''

_PY_ASYNC = '''
    def test_async_functionality(self):
        """Coroutine functions of the module must be awaitable."""
        coroutines = [
            member for _, member in inspect.getmembers(target, inspect.iscoroutinefunction)
        ]
        for coroutine in coroutines:
            assert inspect.iscoroutinefunction(coroutine)

    def test_async_error_handling(self):
        """Errors raised inside coroutines must propagate to the caller."""
        async def failing():
            raise ValueError("expected")

        with pytest.raises(ValueError):
            asyncio.run(failing())
'''

_PY_FOOTER = '''
    def test_security_properties(self):
        """Malicious input must be handled safely."""
        for malicious_input in MALICIOUS_INPUTS:
            assert isinstance(malicious_input, str)

    def test_memory_usage(self):
        """Memory usage must stay bounded."""
        tracemalloc.start()
        large_data = ["x" * 1000 for _ in range(1000)]
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        assert len(large_data) == 1000
        assert peak / 1024 / 1024 < 100, "Memory usage should be optimized"

    def test_thread_safety(self):
        """Concurrent use must not raise."""
        errors = []

        def worker():
            try:
                getattr(target, "__name__")
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert errors == []


@pytest.mark.parametrize("input_value,expected_type", [
    (1, int),
    ("test", str),
    ([1, 2, 3], list),
    ({"key": "value"}, dict),
    (True, bool),
])
def test_input_type_handling(input_value, expected_type):
    """Test handling of different input types."""
    assert isinstance(input_value, expected_type)
'''


def render_python(symbols: ScaffoldSymbols, flags: CapabilityFlags, code: str) -> str:
    parts: List[str] = [_PY_HEADER.substitute(async_imports="import asyncio\n" if flags.async_code else "")]

    for name in symbols.functions:
        parts.append(_PY_FUNCTION_BLOCKS.substitute(name=name))
    for name in symbols.types:
        parts.append(_PY_CLASS_BLOCKS.substitute(name=name, lower=name.lower()))
    if symbols.is_empty:
        parts.append(_PY_NO_SYMBOLS)

    if flags.post_quantum:
        parts.append(_PY_POST_QUANTUM)
    if flags.async_code:
        parts.append(_PY_ASYNC)

    parts.append(_PY_FOOTER)
    return "".join(parts)


# ============================================================================
# Rust (cargo test)
# ============================================================================

_RS_HEADER = Template("""\
#[cfg(test)]
mod tests {
    use super::*;
    use std::collections::HashMap;
    use std::sync::{Arc, Mutex};
    use std::thread;
    use std::time::{Duration, Instant};
$extra_uses
    fn setup_test_data() -> HashMap<&'static str, Vec<u8>> {
        let mut data = HashMap::new();
        data.insert("valid_input", b"test data".to_vec());
        data.insert("empty_input", Vec::new());
        data.insert("large_input", vec![0u8; 10000]);
        data
    }

    fn teardown_test_data(data: HashMap<&'static str, Vec<u8>>) {
        drop(data);
    }

    #[test]
    fn test_basic_functionality() {
        let test_data = setup_test_data();
        assert!(!test_data.is_empty(), "Test data should be available");
        teardown_test_data(test_data);
    }
""")

_RS_FUNCTION_BLOCKS = Template("""
    #[test]
    fn test_${name}_function() {
        let test_data = setup_test_data();
        if let Some(valid_input) = test_data.get("valid_input") {
            // let result = $name(valid_input);
            // assert!(result.is_ok(), "$name should handle valid input");
            assert!(!valid_input.is_empty());
        }
        teardown_test_data(test_data);
    }

    #[test]
    fn test_${name}_access_control() {
        // Calls with untrusted input must fail gracefully instead of panicking
        let untrusted: Vec<u8> = vec![0xff; 64];
        // let result = $name(&untrusted);
        // assert!(result.is_err(), "$name should reject untrusted input");
        assert_eq!(untrusted.len(), 64, "$name access control test placeholder");
    }
""")

_RS_STRUCT_BLOCKS = Template("""
    #[test]
    fn test_${lower}_creation() {
        // let instance = $name::default();
        // assert_eq!(instance.field, expected_value);
        assert!(true, "$name creation test placeholder");
    }

    #[test]
    fn test_${lower}_visibility() {
        // Secret fields of $name must not be public
        // let instance = $name::default();
        assert!(true, "$name visibility test placeholder");
    }
""")

_RS_NO_SYMBOLS = """
    #[test]
    fn test_placeholder() {
        // No functions or structs were found; extend this scaffold manually
        assert!(true, "Placeholder assertion");
    }
"""

_RS_POST_QUANTUM = """
    #[test]
    fn test_post_quantum_cryptography() {
        let test_data = b"test data for hashing";
        let (pk, sk) = pqcrypto_dilithium::dilithium2::keypair();
        let signed = pqcrypto_dilithium::dilithium2::sign(test_data, &sk);
        assert!(pqcrypto_dilithium::dilithium2::open(&signed, &pk).is_ok());
    }

    #[test]
    fn test_kyber_encapsulation() {
        let (pk, sk) = pqcrypto_kyber::kyber512::keypair();
        let (shared_a, ciphertext) = pqcrypto_kyber::kyber512::encapsulate(&pk);
        let shared_b = pqcrypto_kyber::kyber512::decapsulate(&ciphertext, &sk);
        assert_eq!(shared_a.as_bytes(), shared_b.as_bytes());
    }

    #[test]
    fn test_quantum_resistance() {
        // A security level of at least 128 post-quantum bits is expected
        assert!(true, "Quantum resistance test placeholder");
    }
"""

_RS_ASYNC = """
    #[tokio::test]
    async fn test_async_functionality() {
        // let result = async_function().await;
        // assert!(result.is_ok(), "Async function should complete successfully");
        assert!(true, "Async functionality test placeholder");
    }

    #[tokio::test]
    async fn test_async_error_handling() {
        let handle = tokio::spawn(async { Err::<(), &str>("expected") });
        assert!(handle.await.unwrap().is_err());
    }
"""

_RS_FOOTER = """
    #[test]
    fn test_thread_safety() {
        let shared_data = Arc::new(Mutex::new(0));
        let mut handles = vec![];

        for _ in 0..10 {
            let data = Arc::clone(&shared_data);
            handles.push(thread::spawn(move || {
                let mut num = data.lock().unwrap();
                *num += 1;
            }));
        }
        for handle in handles {
            handle.join().unwrap();
        }

        assert_eq!(*shared_data.lock().unwrap(), 10, "Thread-safe operations should work correctly");
    }

    #[test]
    fn test_memory_safety() {
        let data: Vec<i32> = (0..1000).collect();
        assert_eq!(data.len(), 1000);
        assert!(data.get(999).is_some(), "Should be able to access valid index");
        assert!(data.get(1000).is_none(), "Should not be able to access invalid index");
    }

    #[test]
    fn test_performance() {
        let start = Instant::now();
        let _buffer = vec![0u8; 10000];
        assert!(start.elapsed() < Duration::from_secs(1));
    }

    #[test]
    #[should_panic(expected = "Expected panic for testing")]
    fn test_panic_conditions() {
        panic!("Expected panic for testing");
    }
}
"""


def render_rust(symbols: ScaffoldSymbols, flags: CapabilityFlags, code: str) -> str:
    extra_uses = ""
    if flags.post_quantum:
        extra_uses += "    use pqcrypto_traits::kem::SharedSecret;\n"
    if flags.async_code:
        extra_uses += "    use tokio;\n"

    parts: List[str] = [_RS_HEADER.substitute(extra_uses=extra_uses)]

    for name in symbols.functions:
        parts.append(_RS_FUNCTION_BLOCKS.substitute(name=name))
    for name in symbols.types:
        parts.append(_RS_STRUCT_BLOCKS.substitute(name=name, lower=name.lower()))
    if symbols.is_empty:
        parts.append(_RS_NO_SYMBOLS)

    if flags.post_quantum:
        parts.append(_RS_POST_QUANTUM)
    if flags.async_code:
        parts.append(_RS_ASYNC)

    parts.append(_RS_FOOTER)
    return "".join(parts)


__all__ = ["DEFAULT_CONTRACT_NAME", "render_solidity", "render_python", "render_rust"]
