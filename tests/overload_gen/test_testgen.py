# tests/overload_gen/test_testgen.py
import pytest

from overload_gen.config import EmitOptions
from overload_gen.errors import InvalidFixtureValue, MissingTestFixtures, ValueOutOfRange
from overload_gen.shards import partition
from overload_gen.signatures import generate
from overload_gen.testgen import (
    TestVector,
    emit_test_files,
    ensure_in_bit_range,
    fixtures_for,
    to_exact_int,
)


def count_cases(files):
    return sum(f.count("\n  it('") for f in files)


@pytest.fixture
def add_sigs(ops, uint_type):
    # add_euint8_euint8, add_euint8_uint8, add_uint8_euint8
    return generate([ops["add"]], [uint_type(8, "add")])


class TestValueCoercion:
    def test_int_passthrough(self):
        assert to_exact_int(42) == 42

    def test_strings(self):
        assert to_exact_int("42") == 42
        assert to_exact_int("0x10") == 16
        assert to_exact_int(str(2**256)) == 2**256

    def test_bool_and_integral_float(self):
        assert to_exact_int(True) == 1
        assert to_exact_int(3.0) == 3

    def test_zero_padded_decimal(self):
        assert to_exact_int("010") == 10
        assert to_exact_int("007") == 7
        assert to_exact_int(" 0X1f ") == 31

    def test_fractional_float_rejected(self):
        with pytest.raises(ValueError, match="not an integer"):
            to_exact_int(2.5)

    @pytest.mark.parametrize("value", ["ten", "0b101", "", None, [1]])
    def test_unreadable_values(self, value):
        with pytest.raises(InvalidFixtureValue):
            to_exact_int(value)

    def test_range_is_inclusive(self):
        ensure_in_bit_range(8, 0)
        ensure_in_bit_range(8, 256)

    @pytest.mark.parametrize("value", [-1, 257, 300])
    def test_out_of_range(self, value):
        with pytest.raises(ValueOutOfRange, match="out of range"):
            ensure_in_bit_range(8, value)


class TestFixtureLookup:
    def test_missing_fixtures_raise(self, add_sigs):
        with pytest.raises(MissingTestFixtures, match="add_euint8_euint8 has no test"):
            fixtures_for(add_sigs[0], {})

    def test_missing_fixtures_is_assertion_error(self, add_sigs):
        with pytest.raises(AssertionError):
            fixtures_for(add_sigs[0], {"add_euint8_euint8": []})

    def test_accepts_dicts(self, add_sigs):
        vectors = fixtures_for(add_sigs[1], {"add_euint8_uint8": [{"inputs": ["3", 4], "output": "0x07"}]})

        assert vectors == [TestVector((3, 4), 7)]

    def test_input_out_of_range(self, add_sigs):
        fixtures = {"add_euint8_uint8": [TestVector((300, 1), 45)]}

        with pytest.raises(ValueOutOfRange, match="add_euint8_uint8 input 0"):
            fixtures_for(add_sigs[1], fixtures)

    def test_output_out_of_range(self, add_sigs):
        fixtures = {"add_euint8_uint8": [TestVector((1, 1), 1000)]}

        with pytest.raises(ValueOutOfRange, match="output"):
            fixtures_for(add_sigs[1], fixtures)

    def test_wrong_input_count(self, add_sigs):
        with pytest.raises(ValueError, match="expects 2 inputs"):
            fixtures_for(add_sigs[1], {"add_euint8_uint8": [TestVector((1,), 1)]})


class TestGrouping:
    def test_groups_cross_shard_boundaries(self, ops, uint_type, ones, import_config, user_decrypt):
        sigs = generate([ops["add"], ops["shl"]], [uint_type(8, "add", "shl")])  # 5 overloads
        shards = partition(sigs, capacity=2)  # shards of 2, 2, 1

        files = emit_test_files(shards, 2, ones(sigs), import_config, user_decrypt)

        assert len(files) == 2
        assert [count_cases([f]) for f in files] == [3, 2]

    def test_uneven_split(self, ops, uint_type, ones, import_config, user_decrypt):
        sigs = generate([ops["add"], ops["shl"], ops["neg"]], [uint_type(8, "add", "shl", "neg")])
        shards = partition(sigs, capacity=4)  # 6 overloads

        files = emit_test_files(shards, 4, ones(sigs), import_config, user_decrypt)

        # ceil(6 / 4) = 2 per group
        assert [count_cases([f]) for f in files] == [2, 2, 2]

    def test_more_groups_than_overloads(self, add_sigs, ones, import_config, user_decrypt):
        files = emit_test_files(partition(add_sigs), 10, ones(add_sigs), import_config, user_decrypt)

        assert len(files) == 3

    def test_case_count_matches_fixtures(self, ops, uint_type, ones, import_config, public_decrypt):
        sigs = generate(list(ops.values()), [uint_type(8, *ops), uint_type(16, *ops)])
        shards = partition(sigs, capacity=5)

        files = emit_test_files(shards, 3, ones(sigs, count=3), import_config, public_decrypt)

        assert count_cases(files) == 3 * len(sigs)

    def test_each_group_wrapped(self, add_sigs, ones, import_config, user_decrypt):
        files = emit_test_files(partition(add_sigs), 3, ones(add_sigs), import_config, user_decrypt)

        for index, code in enumerate(files, start=1):
            assert f"describe('FHEVM operations {index}', function () {{" in code
            assert code.endswith("});\n")
            assert code.count("describe(") == 1

    def test_no_overloads(self, import_config, user_decrypt):
        assert emit_test_files([], 3, {}, import_config, user_decrypt) == []

    def test_invalid_group_count(self, add_sigs, ones, import_config, user_decrypt):
        with pytest.raises(ValueError, match="must be positive"):
            emit_test_files(partition(add_sigs), 0, ones(add_sigs), import_config, user_decrypt)

    def test_missing_fixture_aborts(self, add_sigs, ones, import_config, user_decrypt):
        fixtures = ones(add_sigs[:2])

        with pytest.raises(MissingTestFixtures, match="add_uint8_euint8"):
            emit_test_files(partition(add_sigs), 1, fixtures, import_config, user_decrypt)

    def test_out_of_range_fixture_aborts(self, add_sigs, ones, import_config, user_decrypt):
        fixtures = ones(add_sigs)
        fixtures["add_euint8_uint8"] = [TestVector((300, 1), 45)]

        with pytest.raises(ValueOutOfRange):
            emit_test_files(partition(add_sigs), 1, fixtures, import_config, user_decrypt)

    def test_shuffle_reorders_shards_in_place(self, ops, uint_type, ones, import_config):
        sigs = generate(list(ops.values()), [uint_type(8, *ops)])
        shards = partition(sigs, capacity=6)
        before = [list(s.overloads) for s in shards]
        options = EmitOptions(shuffle=True, shuffle_with_pseudo_rand=True)

        emit_test_files(shards, 1, ones(sigs), import_config, options)

        for shard, original in zip(shards, before):
            assert sorted(shard.overloads, key=repr) == sorted(original, key=repr)


class TestUserDecryptCases:
    def test_encrypted_and_scalar_inputs(self, add_sigs, import_config, user_decrypt):
        fixtures = {
            "add_euint8_euint8": [TestVector((1, 2), 3)],
            "add_euint8_uint8": [TestVector((3, 4), 7)],
            "add_uint8_euint8": [TestVector((5, 6), 11)],
        }

        code = emit_test_files(partition(add_sigs), 1, fixtures, import_config, user_decrypt)[0]

        assert "input.add8(3n);" in code
        assert "this.contract1.add_euint8_uint8(encryptedAmount.handles[0], 4n, encryptedAmount.inputProof)" in code
        assert "this.contract1.add_uint8_euint8(5n, encryptedAmount.handles[0], encryptedAmount.inputProof)" in code
        assert (
            "this.contract1.add_euint8_euint8(encryptedAmount.handles[0], encryptedAmount.handles[1], "
            "encryptedAmount.inputProof)"
        ) in code
        assert "const res = await decrypt8(await this.contract1.resEuint8());" in code
        assert "expect(res).to.equal(7n);" in code

    def test_test_names(self, add_sigs, ones, import_config, user_decrypt):
        code = emit_test_files(partition(add_sigs), 1, ones(add_sigs, count=2), import_config, user_decrypt)[0]

        assert "it('test operator \"add\" overload (euint8, uint8) => euint8 test 1'" in code
        assert "it('test operator \"add\" overload (euint8, uint8) => euint8 test 2'" in code

    def test_boolean_result(self, ops, uint_type, import_config, user_decrypt):
        sigs = generate([ops["eq"]], [uint_type(16, "eq")])
        fixtures = {s.method_name: [TestVector((9, 9), 1)] for s in sigs}

        code = emit_test_files(partition(sigs), 1, fixtures, import_config, user_decrypt)[0]

        assert "decryptBool(await this.contract1.resEbool())" in code
        assert "expect(res).to.equal(true);" in code

    def test_preamble(self, add_sigs, ones, import_config, user_decrypt):
        code = emit_test_files(partition(add_sigs), 1, ones(add_sigs), import_config, user_decrypt)[0]

        assert code.startswith("import { expect } from 'chai';")
        assert "import { createInstances, decrypt8 } from '../instance';" in code
        assert "import { getSigners, initSigners } from '../signers';" in code
        assert "import type { FHEVMTestSuite1 } from '../../types/contracts/tests/FHEVMTestSuite1';" in code
        assert "this.instances = instances;" in code

    def test_preamble_deploys_touched_shards_only(self, ops, uint_type, ones, import_config, user_decrypt):
        sigs = generate(list(ops.values()), [uint_type(8, *ops)])  # 12 overloads
        shards = partition(sigs, capacity=4)

        files = emit_test_files(shards, 2, ones(sigs), import_config, user_decrypt)

        assert "deployFHEVMTestFixture1" in files[0]
        assert "deployFHEVMTestFixture2" in files[0]
        assert "deployFHEVMTestFixture3" not in files[0]
        assert "deployFHEVMTestFixture1" not in files[1]
        assert "this.contract3 = contract3;" in files[1]

    def test_helpers_follow_return_types(self, ops, uint_type, ones, import_config, user_decrypt):
        sigs = generate([ops["add"], ops["eq"]], [uint_type(160, "add", "eq")])

        code = emit_test_files(partition(sigs), 1, ones(sigs), import_config, user_decrypt)[0]

        assert "import { createInstances, decrypt160, decryptBool } from '../instance';" in code
        assert "decrypt160(await this.contract1.resEuint160())" in code

    def test_helpers_per_group(self, ops, uint_type, ones, import_config, user_decrypt):
        sigs = generate([ops["eq"], ops["neg"]], [uint_type(8, "eq", "neg")])  # 3 eq, then neg
        shards = partition(sigs)

        files = emit_test_files(shards, 2, ones(sigs), import_config, user_decrypt)

        assert "import { createInstances, decryptBool } from '../instance';" in files[0]
        assert "import { createInstances, decryptBool, decrypt8 } from '../instance';" in files[1]


class TestPublicDecryptCases:
    def test_public_decrypt_flow(self, add_sigs, import_config, public_decrypt):
        fixtures = {s.method_name: [TestVector((3, 4), 7)] for s in add_sigs}

        code = emit_test_files(partition(add_sigs), 1, fixtures, import_config, public_decrypt)[0]

        assert code.startswith("import { assert } from 'chai';")
        assert "import { createInstance } from '../instance';" in code
        assert "this.instance.createEncryptedInput(this.contract1Address, this.signer.address);" in code
        assert "const handle = await this.contract1.resEuint8();" in code
        assert "const res = await this.instance.publicDecrypt([handle]);" in code
        assert "assert.deepEqual(res.clearValues[handle], 7n);" in code
        assert "decrypt8(" not in code
