"""Tests for build fact models and version validation."""

import time

import pytest
from pydantic import ValidationError

from buildinfo.models import FLAT_FIELDS, FactSet, VcsFacts, is_valid_version


class TestIsValidVersion:
    @pytest.mark.parametrize(
        "version",
        ["1.2.3", "0.1.0", "10", "1.2.3-beta.1", "0.4.0rc1", "1.0.dev0", "2.0.0+local.7"],
    )
    def test_accepts_release_and_prerelease_versions(self, version):
        assert is_valid_version(version)

    @pytest.mark.parametrize("version", ["", "abc", "v1.2.3", "1..2", "1.2.3 ", " 1.2"])
    def test_rejects_malformed_versions(self, version):
        assert not is_valid_version(version)

    @pytest.mark.parametrize(
        "version",
        [
            "1.0.0+20240115123456789abcdefgh/2",
            "1" + "a" * 5000 + "!",
            "1.0" + "-rc1" * 2000 + "/",
        ],
    )
    def test_rejects_long_malformed_versions_quickly(self, version):
        started = time.perf_counter()
        assert not is_valid_version(version)
        assert time.perf_counter() - started < 1.0

    def test_accepts_long_local_version(self):
        assert is_valid_version("1.0.0+20240115123456789abcdefgh.2")

    def test_malformed_version_rejected_by_factset_quickly(self):
        started = time.perf_counter()
        with pytest.raises(ValidationError, match="package_version"):
            FactSet(
                package_version="1" + "a" * 5000 + "!",
                os="linux",
                arch="x86_64",
                compiler_version="CPython 3.12.4",
            )
        assert time.perf_counter() - started < 1.0


class TestVcsFacts:
    def test_empty_commit_hash_rejected(self):
        with pytest.raises(ValidationError, match="commit_hash"):
            VcsFacts(commit_hash="")

    def test_defaults(self):
        vcs = VcsFacts(commit_hash="abc123")
        assert vcs.branch is None
        assert vcs.dirty is False
        assert vcs.describe is None


class TestFactSet:
    def test_invalid_package_version_rejected(self):
        with pytest.raises(ValidationError, match="package_version"):
            FactSet(package_version="not-a-version", os="linux", arch="x86_64", compiler_version="CPython 3.12.4")

    def test_is_immutable(self, full_facts):
        with pytest.raises(ValidationError):
            full_facts.package_version = "9.9.9"

    def test_to_flat_follows_field_order(self, full_facts):
        assert tuple(full_facts.to_flat()) == FLAT_FIELDS

    def test_to_flat_without_vcs(self, no_vcs_facts):
        flat = no_vcs_facts.to_flat()
        assert flat["vcs_commit_hash"] is None
        assert flat["vcs_branch"] is None
        assert flat["vcs_dirty"] is None
        assert flat["vcs_describe"] is None

    def test_from_flat_restores_facts(self, full_facts):
        assert FactSet.from_flat(full_facts.to_flat()) == full_facts

    def test_from_flat_without_commit_has_no_vcs(self, no_vcs_facts):
        restored = FactSet.from_flat(no_vcs_facts.to_flat())
        assert restored.vcs is None
        assert restored == no_vcs_facts

    def test_from_flat_coerces_string_dirty_flag(self, full_facts):
        flat = {**full_facts.to_flat(), "vcs_dirty": "true"}
        assert FactSet.from_flat(flat).vcs.dirty is True

    def test_from_flat_missing_version_raises(self, full_facts):
        flat = {**full_facts.to_flat(), "package_version": None}
        with pytest.raises(ValidationError, match="package_version"):
            FactSet.from_flat(flat)
