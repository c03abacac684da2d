"""
Tests for test scaffold generation.

Covers symbol extraction, capability flags and the per-language templates
for Foundry (Solidity), pytest (Python) and cargo test (Rust).
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from exceptions import UnsupportedLanguageError
from languages import get_bundle
from simulator import extract_test_names
from testgen import (
    DEFAULT_CONTRACT_NAME,
    CapabilityFlags,
    ScaffoldSymbols,
    TestScaffoldGenerator,
    detect_capabilities,
    extract_symbols,
    render_python,
)

VAULT = """pragma solidity ^0.8.0;
import "@openzeppelin/contracts/security/ReentrancyGuard.sol";
contract Vault is ReentrancyGuard {
    function deposit() external payable nonReentrant {}
    function balance() external view returns (uint256) {}
}
"""

ASYNC_CLIENT = """import asyncio

class Client:
    async def fetch(self, url):
        return await self._helper(url)

    def _helper(self, url):
        return url
"""

PQ_WALLET = """use pqcrypto_dilithium::dilithium2::*;
pub struct Wallet { key: Vec<u8> }
pub fn sign_tx(w: &Wallet) -> Vec<u8> { dilithium_sign(w) }
"""


# ============================================================================
# Symbol extraction and capability flags
# ============================================================================


class TestExtractSymbols:
    def test_solidity_symbols(self):
        symbols = extract_symbols(VAULT, get_bundle("solidity").symbol_convention)
        assert symbols.functions == ("deposit", "balance")
        # "contracts/security" in the import path is not a declaration
        assert symbols.types == ("Vault",)

    def test_python_private_names_skipped(self):
        symbols = extract_symbols(ASYNC_CLIENT, get_bundle("python").symbol_convention)
        assert symbols.functions == ("fetch",)
        assert symbols.types == ("Client",)

    def test_duplicates_removed_in_order(self):
        code = "def a():\n    pass\ndef b():\n    pass\ndef a():\n    pass\n"
        symbols = extract_symbols(code, get_bundle("python").symbol_convention)
        assert symbols.functions == ("a", "b")

    def test_rust_symbols(self):
        symbols = extract_symbols(PQ_WALLET, get_bundle("rust").symbol_convention)
        assert symbols.functions == ("sign_tx",)
        assert symbols.types == ("Wallet",)

    def test_empty(self):
        assert extract_symbols("", get_bundle("rust").symbol_convention).is_empty


class TestDetectCapabilities:
    def test_reentrancy(self):
        bundle = get_bundle("solidity")
        flags = detect_capabilities(VAULT, "solidity", reentrancy_markers=bundle.reentrancy_markers)
        assert flags == CapabilityFlags(post_quantum=False, reentrancy_guard=True, async_code=False)

    def test_post_quantum_markers(self):
        assert detect_capabilities("bytes32 h = sphincsHash(d);", "solidity").post_quantum
        assert detect_capabilities(PQ_WALLET, "rust").post_quantum
        assert not detect_capabilities("bytes32 h = keccak256(d);", "solidity").post_quantum

    def test_async(self):
        bundle = get_bundle("python")
        flags = detect_capabilities(ASYNC_CLIENT, "python", async_markers=bundle.async_markers)
        assert flags.async_code


# ============================================================================
# Solidity scaffold
# ============================================================================


class TestSolidityScaffold:
    def setup_method(self):
        self.generator = TestScaffoldGenerator()

    def test_vault_scaffold(self):
        text = self.generator.generate(VAULT, "solidity")
        assert "contract VaultTest is Test {" in text
        assert 'import "../src/Vault.sol";' in text
        assert "function testDepositFunctionality() public" in text
        assert "function testDepositAccessControl() public" in text
        assert "call{value: value}" in text
        assert "function testBalanceFunctionality() public" in text
        assert "staticcall" in text
        assert "function testReentrancyProtection() public" in text
        assert "contract ReentrancyAttacker {" in text
        assert "testContract.deposit();" in text

    def test_vault_test_count(self):
        text = self.generator.generate(VAULT, "solidity")
        names = extract_test_names(text, "solidity")
        assert names[0] == "testContractDeployment"
        assert len(names) == 9

    def test_empty_source(self):
        text = self.generator.generate("", "solidity")
        assert f"contract {DEFAULT_CONTRACT_NAME}Test is Test" in text
        assert "function testPlaceholder() public" in text
        assert "// No functions to test" in text
        assert "ReentrancyAttacker" not in text

    def test_post_quantum_blocks(self):
        code = "contract Hasher {\n    function digest() public { postQuantumHash(x); }\n}\n"
        text = self.generator.generate(code, "solidity")
        assert "function testPostQuantumSecurity() public" in text
        assert "function testDilithiumSignatureVerification() public" in text
        assert 'import "../src/libraries/PostQuantumHash.sol";' in text


# ============================================================================
# Python scaffold
# ============================================================================


class TestPythonScaffold:
    def setup_method(self):
        self.generator = TestScaffoldGenerator()

    def test_async_class_scaffold(self):
        text = self.generator.generate(ASYNC_CLIENT, "python")
        assert "import asyncio\n" in text
        assert "def test_fetch_functionality(self):" in text
        assert "def test_fetch_access_control(self):" in text
        assert "def test_client_initialization(self):" in text
        assert "def test_client_encapsulation(self):" in text
        assert "def test_async_functionality(self):" in text
        assert "_helper" not in text

    def test_test_count(self):
        text = self.generator.generate(ASYNC_CLIENT, "python")
        # 2 per function, 2 per class, 2 async, 4 fixed
        assert len(extract_test_names(text, "python")) == 10

    def test_no_async_import_without_async_code(self):
        text = self.generator.generate("def run():\n    return 1\n", "python")
        assert "import asyncio" not in text
        assert "test_async_functionality" not in text

    def test_placeholder_when_no_symbols(self):
        text = render_python(ScaffoldSymbols(), CapabilityFlags(), "")
        assert "def test_placeholder(self):" in text

    def test_post_quantum_blocks(self):
        code = "import pqcrypto.hash.sphincsplus as pq_hash\n\ndef digest(d):\n    return pq_hash.hash(d)\n"
        text = self.generator.generate(code, "python")
        assert "def test_post_quantum_cryptography(self):" in text
        assert "def test_dilithium_signatures(self):" in text
        assert "def test_quantum_resistance_properties(self):" in text


# ============================================================================
# Rust scaffold
# ============================================================================


class TestRustScaffold:
    def setup_method(self):
        self.generator = TestScaffoldGenerator()

    def test_post_quantum_wallet(self):
        text = self.generator.generate(PQ_WALLET, "rust")
        assert text.startswith("#[cfg(test)]\nmod tests {")
        assert "fn test_sign_tx_function()" in text
        assert "fn test_sign_tx_access_control()" in text
        assert "fn test_wallet_creation()" in text
        assert "fn test_post_quantum_cryptography()" in text
        assert "fn test_kyber_encapsulation()" in text

    def test_test_count(self):
        text = self.generator.generate(PQ_WALLET, "rust")
        # should_panic and tokio tests are not plain #[test] fns
        assert len(extract_test_names(text, "rust")) == 11

    def test_async_blocks(self):
        text = self.generator.generate("async fn load() {\n    fetch().await;\n}\n", "rust")
        assert "#[tokio::test]" in text
        assert "async fn test_async_functionality()" in text


class TestScaffoldErrors:
    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguageError):
            TestScaffoldGenerator().generate("x", "cobol")

    @pytest.mark.parametrize("language", ["solidity", "python", "rust"])
    def test_never_empty(self, language):
        assert TestScaffoldGenerator().generate("", language).strip()
